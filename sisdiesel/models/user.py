# sisdiesel/models/user.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class UserOut(BaseModel):
    id: str
    nome: str
    email: str
    empresa_mae_id: str
    role: str
    created_at: Optional[datetime] = None


class UserLogin(BaseModel):
    email: str
    senha: str
    empresa_mae_id: Optional[str] = None

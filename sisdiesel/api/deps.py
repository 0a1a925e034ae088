# sisdiesel/api/deps.py
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from sisdiesel.core.security import decode_token
from sisdiesel.core.db import get_db, USERS
from typing import List

security = HTTPBearer()

USER_PROJECTION = {"_id": 0, "senha_hash": 0}

async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    token = credentials.credentials
    try:
        payload = decode_token(token)
        user_id = payload.get("sub")
        if not user_id:
            raise HTTPException(status_code=401, detail="Token inválido")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Token inválido ou expirado")

    user = await get_db()[USERS].find_one({"id": user_id}, USER_PROJECTION)
    if not user:
        raise HTTPException(status_code=401, detail="Usuário não encontrado")
    if payload.get("empresa_mae_id") and payload["empresa_mae_id"] != user.get("empresa_mae_id"):
        raise HTTPException(status_code=401, detail="Token não pertence à empresa do usuário")
    return user  # dict

def require_role(roles: List[str]):
    async def checker(user=Depends(get_current_user)):
        if user.get("role") not in roles:
            raise HTTPException(status_code=403, detail="Não autorizado")
        return user
    return checker

def empresa_id(user: dict) -> str:
    return user["empresa_mae_id"]

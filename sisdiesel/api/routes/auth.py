# sisdiesel/api/routes/auth.py
import logging
from fastapi import APIRouter, HTTPException, Request as FastAPIRequest, Depends
from sisdiesel.core.rate_limit import limiter, LOGIN_LIMIT
from sisdiesel.core.db import get_db, USERS
from sisdiesel.core.security import verify_password, create_access_token
from sisdiesel.api.deps import get_current_user
from sisdiesel.models.user import UserLogin, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")

@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
async def login(request: FastAPIRequest, user_login: UserLogin):
    filt = {"email": user_login.email.strip().lower()}
    if user_login.empresa_mae_id:
        filt["empresa_mae_id"] = user_login.empresa_mae_id
    user_doc = await get_db()[USERS].find_one(filt, {"_id": 0})
    if not user_doc or not verify_password(user_login.senha, user_doc.get("senha_hash", "")):
        logger.info("Falha de login para %s", filt["email"])
        raise HTTPException(401, "E-mail ou senha incorretos")

    token = create_access_token(sub=user_doc["id"], empresa_mae_id=user_doc["empresa_mae_id"])
    user_doc.pop("senha_hash", None)
    return {"access_token": token, "token_type": "bearer", "user": UserOut(**user_doc)}

@router.get("/me", response_model=UserOut)
async def me(current_user=Depends(get_current_user)):
    return current_user

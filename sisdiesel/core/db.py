# sisdiesel/core/db.py
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from sisdiesel.core.config import settings
import certifi

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None

# Coleções
USERS = "users"
CHECKLIST_TEMPLATES = "checklist_templates"
CHECKLISTS = "checklists"
CHECKLIST_RESPOSTAS = "checklist_respostas"
ORDENS_SERVICO = "ordens_servico"


def get_client() -> AsyncIOMotorClient:
    """
    Cria um único cliente Motor.
    Com MONGO_TLS=true usa o CA bundle do certifi (necessário no Atlas / mongodb+srv).
    """
    global _client
    if _client is None:
        kwargs = {"serverSelectionTimeoutMS": 20000}
        if settings.mongo_tls:
            kwargs.update(tls=True, tlsCAFile=certifi.where())
        _client = AsyncIOMotorClient(settings.mongo_url, **kwargs)
    return _client


def get_db() -> AsyncIOMotorDatabase:
    global _db
    if _db is None:
        _db = get_client()[settings.db_name]
    return _db


async def close_db() -> None:
    """
    Fecha o cliente global. Usado por sisdiesel/main.py no shutdown.
    """
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None

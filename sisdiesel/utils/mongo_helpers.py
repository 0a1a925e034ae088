# sisdiesel/utils/mongo_helpers.py
import functools
import logging
from typing import Any, Dict

from pymongo.errors import PyMongoError

from sisdiesel.core.errors import TransportError

logger = logging.getLogger(__name__)

# Campos internos que nunca saem dos repositórios
PUBLIC_PROJECTION = {"_id": 0, "lock_token": 0, "lock_expires_at": 0}


def transport_guard(func):
    """
    Converte falhas do driver (PyMongoError) em TransportError,
    preservando a mensagem original para o chamador.
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyMongoError as e:
            logger.exception("Erro no MongoDB em %s", func.__qualname__)
            raise TransportError(str(e)) from e
    return wrapper


def version_filter(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Filtro otimista: casa somente se o documento ainda está na versão lida."""
    if "version" in doc:
        return {"version": doc["version"]}
    return {"version": {"$exists": False}}


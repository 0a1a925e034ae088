# sisdiesel/core/locks.py
"""
Lock por registro (lease) gravado no próprio documento.

A aquisição é um find_one_and_update condicional: só um chamador consegue
gravar o lock_token enquanto o lease anterior estiver vigente. Quem perde
espera (polling) até lock_wait_seconds e, ao conseguir o lock, relê o estado;
por isso o segundo finalize/close de uma corrida enxerga o registro já
finalizado/fechado em vez de sobrescrevê-lo.
"""
import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Type

from pymongo.errors import PyMongoError

from sisdiesel.core.config import settings
from sisdiesel.core.db import get_db
from sisdiesel.core.errors import ConcurrentUpdateError, SisDieselError, TransportError

logger = logging.getLogger(__name__)


async def _try_acquire(collection: str, entity_id: str, token: str) -> bool:
    now = time.time()
    doc = await get_db()[collection].find_one_and_update(
        {"id": entity_id, "$or": [{"lock_token": None}, {"lock_expires_at": {"$lt": now}}]},
        {"$set": {"lock_token": token, "lock_expires_at": now + settings.lock_ttl_seconds}},
        projection={"_id": 1},
    )
    return doc is not None


async def _release(collection: str, entity_id: str, token: str) -> None:
    await get_db()[collection].update_one(
        {"id": entity_id, "lock_token": token},
        {"$set": {"lock_token": None, "lock_expires_at": None}},
    )


@asynccontextmanager
async def row_lock(collection: str, entity_id: str, not_found: Type[SisDieselError]):
    token = uuid.uuid4().hex
    deadline = time.monotonic() + settings.lock_wait_seconds
    try:
        while not await _try_acquire(collection, entity_id, token):
            if await get_db()[collection].find_one({"id": entity_id}, {"_id": 1}) is None:
                raise not_found()
            if time.monotonic() >= deadline:
                logger.warning("Timeout aguardando lock de %s/%s", collection, entity_id)
                raise ConcurrentUpdateError()
            await asyncio.sleep(settings.lock_poll_interval)
    except PyMongoError as e:
        raise TransportError(str(e)) from e

    try:
        yield token
    finally:
        try:
            await _release(collection, entity_id, token)
        except PyMongoError:
            # o lease expira sozinho após lock_ttl_seconds
            logger.exception("Falha ao liberar lock de %s/%s", collection, entity_id)

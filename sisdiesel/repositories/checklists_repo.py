# sisdiesel/repositories/checklists_repo.py
import time
from datetime import datetime
from typing import Dict, Any, List
from pymongo import ReturnDocument
from sisdiesel.core.config import settings
from sisdiesel.core.db import get_db, CHECKLISTS
from sisdiesel.utils.mongo_helpers import PUBLIC_PROJECTION, transport_guard, version_filter

@transport_guard
async def find_by_id(empresa_id: str, checklist_id: str) -> dict | None:
    return await get_db()[CHECKLISTS].find_one({"id": checklist_id, "empresa_mae_id": empresa_id}, PUBLIC_PROJECTION)

@transport_guard
async def find_by_ordem(empresa_id: str, ordem_id: str) -> dict | None:
    return await get_db()[CHECKLISTS].find_one(
        {"ordem_servico_id": ordem_id, "empresa_mae_id": empresa_id}, PUBLIC_PROJECTION
    )

@transport_guard
async def insert(doc: dict):
    await get_db()[CHECKLISTS].insert_one(doc)
    doc.pop("_id", None)

@transport_guard
async def claim(checklist: dict, lock_token: str) -> dict | None:
    """
    Renova o lease e incrementa a versão antes de qualquer gravação de respostas.
    Só casa se o lock ainda pertence a quem chama e ninguém gravou desde a leitura;
    caso contrário devolve None e nada foi escrito.
    """
    filt = {
        "id": checklist["id"],
        "lock_token": lock_token,
        "status": {"$ne": "finalizado"},
        **version_filter(checklist),
    }
    return await get_db()[CHECKLISTS].find_one_and_update(
        filt,
        {"$set": {"lock_expires_at": time.time() + settings.lock_ttl_seconds}, "$inc": {"version": 1}},
        projection=PUBLIC_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )

@transport_guard
async def set_status(checklist: dict, status: str, finalized_at: datetime | None = None) -> bool:
    """
    Grava o novo status somente se o checklist continua na versão lida e ainda
    não foi finalizado. data_finalizacao é gravada uma única vez, junto com 'finalizado'.
    """
    set_ops: Dict[str, Any] = {"status": status}
    if finalized_at is not None:
        set_ops["data_finalizacao"] = finalized_at
    filt = {"id": checklist["id"], "status": {"$ne": "finalizado"}, **version_filter(checklist)}
    res = await get_db()[CHECKLISTS].update_one(filt, {"$set": set_ops, "$inc": {"version": 1}})
    return res.modified_count == 1

@transport_guard
async def list_paginated(filt: Dict[str, Any], skip: int, limit: int) -> List[dict]:
    cur = get_db()[CHECKLISTS].find(filt, PUBLIC_PROJECTION).sort("data_inicio", -1).skip(skip).limit(limit)
    return await cur.to_list(length=limit)

@transport_guard
async def count(filt: Dict[str, Any]) -> int:
    return await get_db()[CHECKLISTS].count_documents(filt)

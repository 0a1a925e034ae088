# sisdiesel/repositories/respostas_repo.py
from datetime import datetime, timezone
from typing import List, Dict, Any
from sisdiesel.core.db import get_db, CHECKLIST_RESPOSTAS
from sisdiesel.utils.mongo_helpers import PUBLIC_PROJECTION, transport_guard

@transport_guard
async def upsert(checklist_id: str, item_id: int, resposta, observacao: str | None = None):
    # chave composta (checklist_id, item_id): reenviar o mesmo item atualiza a linha existente
    now = datetime.now(timezone.utc)
    set_ops: Dict[str, Any] = {"resposta": resposta, "updated_at": now}
    if observacao is not None:
        set_ops["observacao"] = observacao
    await get_db()[CHECKLIST_RESPOSTAS].update_one(
        {"checklist_id": checklist_id, "item_id": item_id},
        {"$set": set_ops, "$setOnInsert": {"created_at": now}},
        upsert=True,
    )

async def upsert_many(checklist_id: str, respostas: List[Dict[str, Any]]):
    for r in respostas:
        await upsert(checklist_id, r["item_id"], r["resposta"], r.get("observacao"))

@transport_guard
async def list_by_checklist(checklist_id: str) -> List[dict]:
    cur = get_db()[CHECKLIST_RESPOSTAS].find({"checklist_id": checklist_id}, PUBLIC_PROJECTION).sort("item_id", 1)
    return await cur.to_list(length=None)


# sisdiesel/repositories/templates_repo.py
from typing import List
from sisdiesel.core.db import get_db, CHECKLIST_TEMPLATES
from sisdiesel.utils.mongo_helpers import PUBLIC_PROJECTION, transport_guard

@transport_guard
async def find_by_id(empresa_id: str, template_id: str) -> dict | None:
    return await get_db()[CHECKLIST_TEMPLATES].find_one(
        {"id": template_id, "empresa_mae_id": empresa_id}, PUBLIC_PROJECTION
    )

@transport_guard
async def insert(doc: dict):
    await get_db()[CHECKLIST_TEMPLATES].insert_one(doc)
    doc.pop("_id", None)

@transport_guard
async def list_by_empresa(empresa_id: str, limit: int = 200) -> List[dict]:
    cur = get_db()[CHECKLIST_TEMPLATES].find({"empresa_mae_id": empresa_id}, PUBLIC_PROJECTION).sort("nome", 1).limit(limit)
    return await cur.to_list(length=limit)

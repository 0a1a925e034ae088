# sisdiesel/repositories/ordens_repo.py
from datetime import datetime, timezone
from typing import Dict, Any, List
from pymongo import ReturnDocument
from sisdiesel.core.db import get_db, ORDENS_SERVICO
from sisdiesel.models.common import STATUS_FECHADOS
from sisdiesel.utils.mongo_helpers import PUBLIC_PROJECTION, transport_guard, version_filter

# só casa OS que ainda não estão em status terminal
_ABERTA = {"statusOrdemServico.nome": {"$nin": sorted(STATUS_FECHADOS)}}

@transport_guard
async def find_by_id(empresa_id: str, ordem_id: str) -> dict | None:
    return await get_db()[ORDENS_SERVICO].find_one({"id": ordem_id, "empresa_mae_id": empresa_id}, PUBLIC_PROJECTION)

@transport_guard
async def link_checklist(ordem: dict, checklist_id: str) -> bool:
    filt = {"id": ordem["id"], "checklist_id": None, **_ABERTA, **version_filter(ordem)}
    res = await get_db()[ORDENS_SERVICO].update_one(
        filt,
        {"$set": {"checklist_id": checklist_id, "updated_at": datetime.now(timezone.utc)}, "$inc": {"version": 1}},
    )
    return res.modified_count == 1

@transport_guard
async def unlink_checklist(ordem_id: str, checklist_id: str):
    await get_db()[ORDENS_SERVICO].update_one(
        {"id": ordem_id, "checklist_id": checklist_id},
        {"$set": {"checklist_id": None}, "$inc": {"version": 1}},
    )

@transport_guard
async def set_terminal_status(
    ordem: dict,
    status_final: str,
    observacoes: str | None,
    fechado_por_id: str | None,
    impedimentos_ignorados: List[str],
) -> dict | None:
    now = datetime.now(timezone.utc)
    status_os = dict(ordem.get("statusOrdemServico") or {})
    status_os["nome"] = status_final
    set_ops = {
        "status": status_final,
        "statusOrdemServico": status_os,
        "observacoes_fechamento": observacoes,
        "data_fechamento": now,
        "fechado_por_id": fechado_por_id,
        "impedimentos_ignorados": impedimentos_ignorados,
        "updated_at": now,
    }
    filt = {"id": ordem["id"], **_ABERTA, **version_filter(ordem)}
    return await get_db()[ORDENS_SERVICO].find_one_and_update(
        filt,
        {"$set": set_ops, "$inc": {"version": 1}},
        projection=PUBLIC_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )

@transport_guard
async def update_fields(ordem: dict, fields: Dict[str, Any]) -> dict | None:
    filt = {"id": ordem["id"], **_ABERTA, **version_filter(ordem)}
    upd = {**fields, "updated_at": datetime.now(timezone.utc)}
    return await get_db()[ORDENS_SERVICO].find_one_and_update(
        filt,
        {"$set": upd, "$inc": {"version": 1}},
        projection=PUBLIC_PROJECTION,
        return_document=ReturnDocument.AFTER,
    )

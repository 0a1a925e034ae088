# sisdiesel/services/closing_gate.py
"""
Gate de fechamento de ordens de serviço.

`evaluate` é uma leitura pura: carrega a OS e o checklist vinculado e devolve
um ClosingDecision. Nada é gravado nem cacheado; o fechamento (ordem_service.close)
chama o gate de novo no momento do commit.
"""
import logging
from typing import Optional

from sisdiesel.core.errors import ServiceOrderNotFoundError
from sisdiesel.models.common import (
    STATUS_FECHADOS,
    MOTIVO_CHECKLIST_NAO_FINALIZADO,
    MOTIVO_CHECKLIST_NAO_INICIADO,
)
from sisdiesel.models.ordem_servico import ClosingDecision
from sisdiesel.repositories import checklists_repo, ordens_repo

logger = logging.getLogger(__name__)


def status_label(ordem: dict) -> str:
    nome = (ordem.get("statusOrdemServico") or {}).get("nome")
    return nome or ordem.get("status") or "Não informado"


def is_closed(ordem: dict) -> bool:
    return (ordem.get("statusOrdemServico") or {}).get("nome") in STATUS_FECHADOS


async def find_linked_checklist(empresa_id: str, ordem: dict) -> Optional[dict]:
    checklist_id = ordem.get("checklist_id")
    if checklist_id:
        checklist = await checklists_repo.find_by_id(empresa_id, checklist_id)
        if checklist is None:
            logger.warning("OS %s aponta para checklist inexistente %s", ordem["id"], checklist_id)
        return checklist
    return await checklists_repo.find_by_ordem(empresa_id, ordem["id"])


async def evaluate_order(empresa_id: str, ordem: dict) -> ClosingDecision:
    checklist = await find_linked_checklist(empresa_id, ordem)
    tem_checklist = checklist is not None
    finalizado = (checklist["status"] == "finalizado") if tem_checklist else None

    base = {
        "tem_checklist": tem_checklist,
        "checklist_finalizado": finalizado,
        "checklist_id": checklist["id"] if tem_checklist else None,
        "status_atual": status_label(ordem),
    }

    # OS já fechada é um ramo próprio, não um motivo de impedimento
    if is_closed(ordem):
        return ClosingDecision(resultado="ja_fechada", pode_fechar=False, **base)

    motivos = []
    if tem_checklist and not finalizado:
        motivos.append(MOTIVO_CHECKLIST_NAO_FINALIZADO)
    elif not tem_checklist and ordem.get("checklist_obrigatorio"):
        motivos.append(MOTIVO_CHECKLIST_NAO_INICIADO)

    return ClosingDecision(
        resultado="bloqueada" if motivos else "liberada",
        pode_fechar=not motivos,
        motivos_impedimento=motivos,
        **base,
    )


async def evaluate(empresa_id: str, ordem_id: str) -> ClosingDecision:
    ordem = await ordens_repo.find_by_id(empresa_id, ordem_id)
    if not ordem:
        raise ServiceOrderNotFoundError()
    return await evaluate_order(empresa_id, ordem)

# sisdiesel/services/ordem_service.py
import logging

from sisdiesel.core.config import settings
from sisdiesel.core.db import ORDENS_SERVICO
from sisdiesel.core.errors import (
    ConcurrentUpdateError,
    InvalidTerminalStatusError,
    OrderAlreadyClosedError,
    OrderClosingBlockedError,
    ServiceOrderNotFoundError,
)
from sisdiesel.core.locks import row_lock
from sisdiesel.models.common import STATUS_FINAIS
from sisdiesel.models.ordem_servico import FecharOrdemPayload, OrdemServicoUpdate
from sisdiesel.repositories import ordens_repo
from sisdiesel.services import closing_gate

logger = logging.getLogger(__name__)


async def _get_or_404(empresa_id: str, ordem_id: str) -> dict:
    ordem = await ordens_repo.find_by_id(empresa_id, ordem_id)
    if not ordem:
        raise ServiceOrderNotFoundError()
    return ordem


async def get_order(empresa_id: str, ordem_id: str) -> dict:
    return await _get_or_404(empresa_id, ordem_id)


async def close(empresa_id: str, ordem_id: str, payload: FecharOrdemPayload, actor: dict) -> dict:
    async with row_lock(ORDENS_SERVICO, ordem_id, ServiceOrderNotFoundError):
        ordem = await _get_or_404(empresa_id, ordem_id)

        # o pode_fechar exibido na UI pode estar velho: reavalia no commit
        decision = await closing_gate.evaluate_order(empresa_id, ordem)
        # OS fechada recusa qualquer novo fechamento, seja qual for o status pedido
        if decision.resultado == "ja_fechada":
            raise OrderAlreadyClosedError()
        if payload.status_final not in STATUS_FINAIS:
            raise InvalidTerminalStatusError(payload.status_final)

        ignorados = []
        if decision.resultado == "bloqueada":
            if settings.closing_gate_enforcing:
                raise OrderClosingBlockedError(decision.motivos_impedimento, enforcing=True)
            if not payload.confirmar_impedimentos:
                raise OrderClosingBlockedError(decision.motivos_impedimento)
            ignorados = decision.motivos_impedimento
            logger.warning(
                "OS %s fechada por %s apesar dos impedimentos: %s",
                ordem_id, actor.get("id"), "; ".join(ignorados),
            )

        observacoes = (payload.observacoes_fechamento or "").strip() or None
        updated = await ordens_repo.set_terminal_status(
            ordem, payload.status_final, observacoes, actor.get("id"), ignorados
        )
        if updated is None:
            current = await _get_or_404(empresa_id, ordem_id)
            if closing_gate.is_closed(current):
                raise OrderAlreadyClosedError()
            raise ConcurrentUpdateError()

    logger.info("OS %s fechada como %s", ordem_id, payload.status_final)
    return updated


async def update_order(empresa_id: str, ordem_id: str, payload: OrdemServicoUpdate) -> dict:
    fields = payload.model_dump(exclude_unset=True)
    async with row_lock(ORDENS_SERVICO, ordem_id, ServiceOrderNotFoundError):
        ordem = await _get_or_404(empresa_id, ordem_id)
        if closing_gate.is_closed(ordem):
            raise OrderAlreadyClosedError()
        if not fields:
            return ordem
        updated = await ordens_repo.update_fields(ordem, fields)
        if updated is None:
            raise ConcurrentUpdateError()
    return updated

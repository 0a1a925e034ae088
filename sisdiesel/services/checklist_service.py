# sisdiesel/services/checklist_service.py
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException

from sisdiesel.core.db import CHECKLISTS, ORDENS_SERVICO
from sisdiesel.core.errors import (
    ChecklistAlreadyLinkedError,
    ChecklistClosedError,
    ChecklistNotFoundError,
    ChecklistTemplateNotFoundError,
    ConcurrentUpdateError,
    EmptySubmissionError,
    IncompleteRequiredAnswersError,
    InvalidAnswerError,
    OrderAlreadyClosedError,
    ServiceOrderNotFoundError,
    TransportError,
)
from sisdiesel.core.locks import row_lock
from sisdiesel.models.checklist import ChecklistProgresso, ChecklistStart, ChecklistTemplateItem, RespostaIn
from sisdiesel.models.common import ALLOWED_TRANSITIONS
from sisdiesel.repositories import checklists_repo, ordens_repo, respostas_repo, templates_repo
from sisdiesel.services.closing_gate import is_closed
from sisdiesel.utils.pagination import meta

logger = logging.getLogger(__name__)

SIM = {"true", "sim", "s", "1"}
NAO = {"false", "nao", "não", "n", "0"}

INT64_MIN, INT64_MAX = -2**63, 2**63 - 1


def ensure_transition(old: str, new: str):
    if old == "finalizado":
        raise ChecklistClosedError()
    if new not in ALLOWED_TRANSITIONS[old]:
        raise HTTPException(status_code=400, detail=f"Transição não permitida: {old} → {new}")


def derive_status(current: str, has_answers: bool) -> str:
    """Status monotônico: qualquer resposta salva leva 'iniciado' para 'em_andamento'."""
    if current == "iniciado" and has_answers:
        return "em_andamento"
    return current


# ----------------------------------------------------------------------------
# Respostas
# ----------------------------------------------------------------------------

def is_empty(value: Any) -> bool:
    # 0 e False são respostas válidas
    return value is None or (isinstance(value, str) and not value.strip())


def template_items(template: dict) -> Dict[int, ChecklistTemplateItem]:
    itens = [ChecklistTemplateItem(**i) for i in template.get("itens") or []]
    itens.sort(key=lambda i: i.ordem)
    return {i.id: i for i in itens}


def coerce_resposta(item: ChecklistTemplateItem, value: Any):
    """Converte o valor bruto para o tipo exigido pelo tipo_resposta do item."""
    tipo = item.tipo_resposta
    if tipo == "sim_nao":
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            v = value.strip().lower()
            if v in SIM:
                return True
            if v in NAO:
                return False
        raise InvalidAnswerError(f"A pergunta '{item.pergunta}' aceita apenas Sim ou Não")

    if tipo == "numerico":
        if isinstance(value, bool):
            raise InvalidAnswerError(f"A pergunta '{item.pergunta}' espera um número")
        if isinstance(value, int):
            # o BSON só grava inteiros de 64 bits
            if not INT64_MIN <= value <= INT64_MAX:
                raise InvalidAnswerError(f"O valor informado para a pergunta '{item.pergunta}' é grande demais")
            return value
        if isinstance(value, float):
            number = value
        elif isinstance(value, str):
            try:
                number = float(value.strip().replace(",", "."))
            except ValueError:
                raise InvalidAnswerError(f"A pergunta '{item.pergunta}' espera um número") from None
        else:
            raise InvalidAnswerError(f"A pergunta '{item.pergunta}' espera um número")
        if not math.isfinite(number):
            raise InvalidAnswerError(f"A pergunta '{item.pergunta}' espera um número finito")
        if number.is_integer() and INT64_MIN <= number <= INT64_MAX:
            return int(number)
        return number

    if tipo == "texto":
        if not isinstance(value, str):
            raise InvalidAnswerError(f"A pergunta '{item.pergunta}' espera um texto")
        return value.strip()

    # multipla_escolha
    if not isinstance(value, str) or value not in (item.opcoes or []):
        raise InvalidAnswerError(f"Opção inválida para a pergunta '{item.pergunta}': {value}")
    return value


def normalize_answers(itens: Dict[int, ChecklistTemplateItem], respostas: Iterable[RespostaIn]) -> List[Dict[str, Any]]:
    """
    Descarta respostas vazias e valida o restante contra o template.
    Todo o lote é validado antes de qualquer gravação.
    """
    out: Dict[int, Dict[str, Any]] = {}
    for r in respostas:
        if is_empty(r.resposta):
            continue
        item = itens.get(r.item_id)
        if item is None:
            raise InvalidAnswerError(f"O item {r.item_id} não pertence ao template deste checklist")
        out[r.item_id] = {
            "item_id": r.item_id,
            "resposta": coerce_resposta(item, r.resposta),
            "observacao": r.observacao,
        }
    return list(out.values())


def _unchanged(new: Dict[str, Any], stored: Optional[dict]) -> bool:
    if stored is None:
        return False
    old = stored.get("resposta")
    # True == 1 em Python; compara o tipo também
    same_value = type(old) is type(new["resposta"]) and old == new["resposta"]
    same_obs = new.get("observacao") is None or new["observacao"] == stored.get("observacao")
    return same_value and same_obs


def progresso(template: dict, respostas: List[dict]) -> ChecklistProgresso:
    itens = template_items(template)
    answered = {r["item_id"] for r in respostas if not is_empty(r.get("resposta"))}
    obrigatorias = [i for i in itens.values() if i.obrigatoria]
    return ChecklistProgresso(
        respondidas=len(answered & set(itens)),
        obrigatorias=len(obrigatorias),
        obrigatorias_pendentes=len([i for i in obrigatorias if i.id not in answered]),
    )


# ----------------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------------

async def _get_or_404(empresa_id: str, checklist_id: str) -> dict:
    checklist = await checklists_repo.find_by_id(empresa_id, checklist_id)
    if not checklist:
        raise ChecklistNotFoundError()
    return checklist


async def _template_for(empresa_id: str, checklist: dict) -> dict:
    template = await templates_repo.find_by_id(empresa_id, checklist["template_id"])
    if not template:
        raise ChecklistTemplateNotFoundError()
    return template


async def _ensure_writable(empresa_id: str, checklist: dict):
    if checklist["status"] == "finalizado":
        raise ChecklistClosedError()
    ordem_id = checklist.get("ordem_servico_id")
    if ordem_id:
        ordem = await ordens_repo.find_by_id(empresa_id, ordem_id)
        if ordem and is_closed(ordem):
            raise OrderAlreadyClosedError()


async def _changed(checklist_id: str, answers: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    stored = {r["item_id"]: r for r in await respostas_repo.list_by_checklist(checklist_id)}
    return [a for a in answers if not _unchanged(a, stored.get(a["item_id"]))]


async def _claim(empresa_id: str, checklist: dict, lock_token: str) -> dict:
    claimed = await checklists_repo.claim(checklist, lock_token)
    if claimed is None:
        current = await _get_or_404(empresa_id, checklist["id"])
        if current["status"] == "finalizado":
            raise ChecklistClosedError()
        raise ConcurrentUpdateError()
    return claimed


# ----------------------------------------------------------------------------
# Operações
# ----------------------------------------------------------------------------

async def start(empresa_id: str, payload: ChecklistStart, actor: dict) -> dict:
    template = await templates_repo.find_by_id(empresa_id, payload.template_id)
    if not template:
        raise ChecklistTemplateNotFoundError()

    doc = {
        "id": uuid.uuid4().hex,
        "empresa_mae_id": empresa_id,
        "template_id": template["id"],
        "veiculo_id": payload.veiculo_id,
        "funcionario_id": payload.funcionario_id,
        "ordem_servico_id": payload.ordem_servico_id,
        "status": "iniciado",
        "data_inicio": datetime.now(timezone.utc),
        "data_finalizacao": None,
        "observacoes": (payload.observacoes or "").strip() or None,
        "iniciado_por_id": actor.get("id"),
        "version": 0,
    }

    if not payload.ordem_servico_id:
        await checklists_repo.insert(doc)
        logger.info("Checklist %s iniciado (template=%s)", doc["id"], template["id"])
        return doc

    async with row_lock(ORDENS_SERVICO, payload.ordem_servico_id, ServiceOrderNotFoundError):
        ordem = await ordens_repo.find_by_id(empresa_id, payload.ordem_servico_id)
        if not ordem:
            raise ServiceOrderNotFoundError()
        if is_closed(ordem):
            raise OrderAlreadyClosedError()
        if ordem.get("checklist_id"):
            raise ChecklistAlreadyLinkedError()
        if not await ordens_repo.link_checklist(ordem, doc["id"]):
            raise ChecklistAlreadyLinkedError()
        try:
            await checklists_repo.insert(doc)
        except TransportError:
            await ordens_repo.unlink_checklist(ordem["id"], doc["id"])
            raise

    logger.info("Checklist %s iniciado (template=%s, os=%s)", doc["id"], template["id"], payload.ordem_servico_id)
    return doc


async def submit_answers(empresa_id: str, checklist_id: str, respostas: List[RespostaIn]) -> dict:
    async with row_lock(CHECKLISTS, checklist_id, ChecklistNotFoundError) as token:
        checklist = await _get_or_404(empresa_id, checklist_id)
        await _ensure_writable(empresa_id, checklist)
        template = await _template_for(empresa_id, checklist)

        answers = normalize_answers(template_items(template), respostas)
        if not answers:
            raise EmptySubmissionError()

        changed = await _changed(checklist_id, answers)
        new_status = derive_status(checklist["status"], has_answers=True)
        if new_status != checklist["status"]:
            ensure_transition(checklist["status"], new_status)
        if changed or new_status != checklist["status"]:
            claimed = await _claim(empresa_id, checklist, token)
            await respostas_repo.upsert_many(checklist_id, changed)
            if new_status != checklist["status"]:
                if not await checklists_repo.set_status(claimed, new_status):
                    raise ConcurrentUpdateError()
                logger.info("Checklist %s: %s → %s", checklist_id, checklist["status"], new_status)
        logger.debug("Checklist %s: %d resposta(s) gravada(s), %d sem alteração", checklist_id, len(changed), len(answers) - len(changed))

    return await _get_or_404(empresa_id, checklist_id)


async def finalize(empresa_id: str, checklist_id: str, respostas: Optional[List[RespostaIn]] = None) -> dict:
    async with row_lock(CHECKLISTS, checklist_id, ChecklistNotFoundError) as token:
        checklist = await _get_or_404(empresa_id, checklist_id)
        await _ensure_writable(empresa_id, checklist)
        template = await _template_for(empresa_id, checklist)
        itens = template_items(template)

        buffered = normalize_answers(itens, respostas or [])
        stored = await respostas_repo.list_by_checklist(checklist_id)
        answered = {r["item_id"] for r in stored if not is_empty(r.get("resposta"))}
        answered.update(a["item_id"] for a in buffered)

        pendentes = [
            {"id": i.id, "pergunta": i.pergunta}
            for i in itens.values()
            if i.obrigatoria and i.id not in answered
        ]
        if pendentes:
            raise IncompleteRequiredAnswersError(pendentes)
        ensure_transition(checklist["status"], "finalizado")

        # nenhuma resposta é gravada se o checklist mudou desde a leitura
        claimed = await _claim(empresa_id, checklist, token)
        if buffered:
            await respostas_repo.upsert_many(checklist_id, await _changed(checklist_id, buffered))

        if not await checklists_repo.set_status(claimed, "finalizado", finalized_at=datetime.now(timezone.utc)):
            raise ConcurrentUpdateError()
        logger.info("Checklist %s finalizado", checklist_id)

    return await _get_or_404(empresa_id, checklist_id)


async def get_checklist(empresa_id: str, checklist_id: str) -> dict:
    checklist = await _get_or_404(empresa_id, checklist_id)
    template = await templates_repo.find_by_id(empresa_id, checklist["template_id"])
    respostas = await respostas_repo.list_by_checklist(checklist_id)
    out = dict(checklist)
    out["template"] = template
    out["respostas"] = respostas
    out["progresso"] = progresso(template or {}, respostas).model_dump()
    return out


async def list_checklists(
    empresa_id: str,
    page: int,
    page_size: int,
    status: Optional[str] = None,
    template_id: Optional[str] = None,
    veiculo_id: Optional[int] = None,
    ordem_servico_id: Optional[str] = None,
) -> dict:
    filt: Dict[str, Any] = {"empresa_mae_id": empresa_id}
    if status: filt["status"] = status
    if template_id: filt["template_id"] = template_id
    if veiculo_id is not None: filt["veiculo_id"] = veiculo_id
    if ordem_servico_id: filt["ordem_servico_id"] = ordem_servico_id

    total = await checklists_repo.count(filt)
    m = meta(total, page, page_size)
    items = await checklists_repo.list_paginated(filt, m.skip, m.page_size)
    return {"items": items, **m.model_dump()}

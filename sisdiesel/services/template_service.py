# sisdiesel/services/template_service.py
import logging
import uuid
from datetime import datetime, timezone

from sisdiesel.core.errors import ChecklistTemplateNotFoundError, InvalidTemplateError
from sisdiesel.models.checklist import ChecklistTemplateCreate
from sisdiesel.repositories import templates_repo

logger = logging.getLogger(__name__)


def build_items(payload: ChecklistTemplateCreate) -> list:
    ids = [i.id for i in payload.itens if i.id is not None]
    if len(ids) != len(set(ids)):
        raise InvalidTemplateError("Os itens do template devem ter ids únicos")

    next_id = max(ids, default=0) + 1
    itens = []
    for pos, item in enumerate(payload.itens):
        opcoes = None
        if item.tipo_resposta == "multipla_escolha":
            opcoes = [o.strip() for o in item.opcoes or [] if o and o.strip()]
            if not opcoes:
                raise InvalidTemplateError(f"A pergunta '{item.pergunta}' é de múltipla escolha e precisa de opções")
            if len(opcoes) != len(set(opcoes)):
                raise InvalidTemplateError(f"A pergunta '{item.pergunta}' tem opções repetidas")
        if item.id is None:
            item_id, next_id = next_id, next_id + 1
        else:
            item_id = item.id
        itens.append({
            "id": item_id,
            "pergunta": item.pergunta.strip(),
            "tipo_resposta": item.tipo_resposta,
            "obrigatoria": item.obrigatoria,
            "opcoes": opcoes,
            "ordem": item.ordem if item.ordem is not None else pos,
        })
    return itens


async def create_template(empresa_id: str, payload: ChecklistTemplateCreate) -> dict:
    doc = {
        "id": uuid.uuid4().hex,
        "empresa_mae_id": empresa_id,
        "nome": payload.nome.strip(),
        "descricao": payload.descricao,
        "itens": build_items(payload),
        "created_at": datetime.now(timezone.utc),
    }
    await templates_repo.insert(doc)
    logger.info("Template de checklist %s criado com %d item(ns)", doc["id"], len(doc["itens"]))
    return doc


async def get_template(empresa_id: str, template_id: str) -> dict:
    template = await templates_repo.find_by_id(empresa_id, template_id)
    if not template:
        raise ChecklistTemplateNotFoundError()
    return template


async def list_templates(empresa_id: str) -> list:
    return await templates_repo.list_by_empresa(empresa_id)

# sisdiesel/api/routes/checklists.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sisdiesel.api.deps import get_current_user, empresa_id
from sisdiesel.core.config import settings
from sisdiesel.models.checklist import Checklist, ChecklistStart, FinalizarPayload, SalvarRespostasPayload
from sisdiesel.models.common import ChecklistStatus
from sisdiesel.services import checklist_service

router = APIRouter()

@router.post("", response_model=Checklist, status_code=201)
async def start_checklist(payload: ChecklistStart, current=Depends(get_current_user)):
    return await checklist_service.start(empresa_id(current), payload, current)

@router.get("")
async def list_checklists(
    current=Depends(get_current_user),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=settings.max_page_size),
    status: Optional[ChecklistStatus] = None,
    template_id: Optional[str] = None,
    veiculo_id: Optional[int] = None,
    ordem_servico_id: Optional[str] = None,
):
    return await checklist_service.list_checklists(
        empresa_id(current), page, page_size,
        status=status, template_id=template_id, veiculo_id=veiculo_id, ordem_servico_id=ordem_servico_id,
    )

@router.get("/{checklist_id}")
async def get_checklist(checklist_id: str, current=Depends(get_current_user)):
    return await checklist_service.get_checklist(empresa_id(current), checklist_id)

@router.post("/{checklist_id}/respostas", response_model=Checklist)
async def save_progress(checklist_id: str, payload: SalvarRespostasPayload, current=Depends(get_current_user)):
    return await checklist_service.submit_answers(empresa_id(current), checklist_id, payload.respostas)

@router.post("/{checklist_id}/finalizar", response_model=Checklist)
async def finalize_checklist(checklist_id: str, payload: FinalizarPayload | None = None, current=Depends(get_current_user)):
    respostas = payload.respostas if payload else []
    return await checklist_service.finalize(empresa_id(current), checklist_id, respostas)

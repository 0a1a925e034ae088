# sisdiesel/api/routes/ordens_servico.py
from fastapi import APIRouter, Depends
from sisdiesel.api.deps import get_current_user, empresa_id
from sisdiesel.models.ordem_servico import ClosingDecision, FecharOrdemPayload, OrdemServicoUpdate
from sisdiesel.services import closing_gate, ordem_service

router = APIRouter()

@router.get("/{ordem_id}")
async def get_order(ordem_id: str, current=Depends(get_current_user)):
    return await ordem_service.get_order(empresa_id(current), ordem_id)

@router.patch("/{ordem_id}")
async def update_order(ordem_id: str, payload: OrdemServicoUpdate, current=Depends(get_current_user)):
    return await ordem_service.update_order(empresa_id(current), ordem_id, payload)

@router.get("/{ordem_id}/pode-fechar", response_model=ClosingDecision)
async def evaluate_closing(ordem_id: str, current=Depends(get_current_user)):
    return await closing_gate.evaluate(empresa_id(current), ordem_id)

@router.post("/{ordem_id}/fechar")
async def close_order(ordem_id: str, payload: FecharOrdemPayload, current=Depends(get_current_user)):
    return await ordem_service.close(empresa_id(current), ordem_id, payload, current)

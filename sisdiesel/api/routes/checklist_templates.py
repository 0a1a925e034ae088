# sisdiesel/api/routes/checklist_templates.py
from fastapi import APIRouter, Depends
from sisdiesel.api.deps import get_current_user, require_role, empresa_id
from sisdiesel.models.checklist import ChecklistTemplateCreate
from sisdiesel.services import template_service

router = APIRouter()

@router.get("")
async def list_templates(current=Depends(get_current_user)):
    return await template_service.list_templates(empresa_id(current))

@router.get("/{template_id}")
async def get_template(template_id: str, current=Depends(get_current_user)):
    return await template_service.get_template(empresa_id(current), template_id)

@router.post("", status_code=201)
async def create_template(payload: ChecklistTemplateCreate, current=Depends(require_role(["admin"]))):
    return await template_service.create_template(empresa_id(current), payload)

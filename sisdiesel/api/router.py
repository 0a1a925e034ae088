# sisdiesel/api/router.py
from fastapi import APIRouter
from sisdiesel.api.routes import auth, checklist_templates, checklists, ordens_servico

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(checklist_templates.router, prefix="/checklist-templates", tags=["checklist-templates"])
api_router.include_router(checklists.router, prefix="/checklists", tags=["checklists"])
api_router.include_router(ordens_servico.router, prefix="/ordens-servico", tags=["ordens-servico"])

# sisdiesel/core/indexes.py
import logging
import uuid
from datetime import datetime, timezone
from sisdiesel.core.db import get_db, USERS, CHECKLIST_TEMPLATES, CHECKLISTS, CHECKLIST_RESPOSTAS, ORDENS_SERVICO
from sisdiesel.core.security import hash_password
from sisdiesel.core.config import settings

logger = logging.getLogger(__name__)

async def ensure_core_indexes(db):
    # usuários
    await db[USERS].create_index([("id", 1)], unique=True)
    await db[USERS].create_index([("empresa_mae_id", 1), ("email", 1)], unique=True)

    # templates
    await db[CHECKLIST_TEMPLATES].create_index([("id", 1)], unique=True)
    await db[CHECKLIST_TEMPLATES].create_index([("empresa_mae_id", 1), ("nome", 1)])

    # checklists
    await db[CHECKLISTS].create_index([("id", 1)], unique=True)
    await db[CHECKLISTS].create_index([("empresa_mae_id", 1), ("data_inicio", -1)])
    await db[CHECKLISTS].create_index([("empresa_mae_id", 1), ("status", 1)])
    await db[CHECKLISTS].create_index([("template_id", 1)])
    await db[CHECKLISTS].create_index([("ordem_servico_id", 1)])

    # respostas: uma linha por (checklist_id, item_id)
    await db[CHECKLIST_RESPOSTAS].create_index([("checklist_id", 1), ("item_id", 1)], unique=True)

    # ordens de serviço
    await db[ORDENS_SERVICO].create_index([("id", 1)], unique=True)
    await db[ORDENS_SERVICO].create_index([("empresa_mae_id", 1), ("statusOrdemServico.nome", 1)])
    await db[ORDENS_SERVICO].create_index([("checklist_id", 1)])

async def init_data(db):
    if await db[USERS].find_one({"role": "admin", "empresa_mae_id": settings.seed_empresa_mae_id}):
        return
    await db[USERS].insert_one({
        "id": uuid.uuid4().hex,
        "nome": "Administrador",
        "email": settings.seed_admin_email.lower(),
        "empresa_mae_id": settings.seed_empresa_mae_id,
        "role": "admin",
        "senha_hash": hash_password(settings.seed_admin_password),
        "created_at": datetime.now(timezone.utc),
    })
    logger.info("init_data: administrador %s criado", settings.seed_admin_email)

async def startup_tasks():
    db = get_db()
    await ensure_core_indexes(db)
    if settings.seed_admin:
        await init_data(db)

import asyncio
import uuid

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from sisdiesel.core import db as db_module
from sisdiesel.core.config import settings
from sisdiesel.core.indexes import ensure_core_indexes
from sisdiesel.core.security import create_access_token

EMPRESA = "1"

ITENS_PADRAO = [
    {"id": 1, "pergunta": "Nível de óleo conferido?", "tipo_resposta": "sim_nao", "obrigatoria": True, "ordem": 0},
    {"id": 2, "pergunta": "Observações gerais", "tipo_resposta": "texto", "obrigatoria": False, "ordem": 1},
]


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def db(monkeypatch):
    """Banco Mongo em memória instalado no lugar do cliente Motor real."""
    database = AsyncMongoMockClient()["sisdiesel_test"]
    monkeypatch.setattr(db_module, "_db", database)
    monkeypatch.setattr(settings, "lock_wait_seconds", 0.3)
    monkeypatch.setattr(settings, "lock_poll_interval", 0.01)
    monkeypatch.setattr(settings, "closing_gate_enforcing", False)
    run(ensure_core_indexes(database))
    return database


@pytest.fixture
def actor():
    return {"id": "user-1", "nome": "Operador", "empresa_mae_id": EMPRESA, "role": "admin"}


@pytest.fixture
def make_template(db):
    def _make(itens=None, empresa=EMPRESA, nome="Inspeção diária"):
        doc = {
            "id": uuid.uuid4().hex,
            "empresa_mae_id": empresa,
            "nome": nome,
            "itens": [dict(i) for i in (ITENS_PADRAO if itens is None else itens)],
        }
        run(db.checklist_templates.insert_one(doc))
        return doc["id"]
    return _make


@pytest.fixture
def make_order(db):
    def _make(status_nome="Em andamento", empresa=EMPRESA, **extra):
        doc = {
            "id": uuid.uuid4().hex,
            "empresa_mae_id": empresa,
            "nome": "Troca de embreagem",
            "status": status_nome,
            "statusOrdemServico": {"id": 2, "nome": status_nome},
            "checklist_obrigatorio": False,
            **extra,
        }
        run(db.ordens_servico.insert_one(doc))
        return doc["id"]
    return _make


@pytest.fixture
def client(db, actor):
    from sisdiesel.main import app

    user = {**actor, "email": "operador@oficina.com", "created_at": None}
    run(db.users.insert_one(user))
    token = create_access_token(sub=actor["id"], empresa_mae_id=EMPRESA)
    c = TestClient(app)
    c.headers.update({"Authorization": f"Bearer {token}"})
    return c

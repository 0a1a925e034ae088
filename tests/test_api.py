from fastapi.testclient import TestClient

from sisdiesel.core.security import create_access_token, hash_password
from sisdiesel.main import app

from conftest import EMPRESA, run

TEMPLATE = {
    "nome": "Inspeção de entrada",
    "itens": [
        {"pergunta": "Nível de óleo conferido?", "tipo_resposta": "sim_nao", "obrigatoria": True},
        {"pergunta": "Quilometragem", "tipo_resposta": "numerico"},
    ],
}


def test_health():
    assert TestClient(app).get("/health").json() == {"ok": True}


def test_requires_token(db):
    res = TestClient(app).get("/api/checklists")
    assert res.status_code in (401, 403)


def test_invalid_token(db):
    res = TestClient(app).get("/api/checklists", headers={"Authorization": "Bearer lixo"})
    assert res.status_code == 401


def test_only_admin_creates_templates(db, client):
    run(db.users.insert_one({"id": "user-2", "nome": "Mecânico", "email": "mec@oficina.com",
                             "empresa_mae_id": EMPRESA, "role": "mecanico"}))
    token = create_access_token(sub="user-2", empresa_mae_id=EMPRESA)
    res = client.post("/api/checklist-templates", json=TEMPLATE, headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 403


def test_template_validation(db, client):
    res = client.post("/api/checklist-templates", json={
        "nome": "Pneus",
        "itens": [{"pergunta": "Estado", "tipo_resposta": "multipla_escolha", "opcoes": []}],
    })
    assert res.status_code == 422
    assert "múltipla escolha" in res.json()["detail"]

    res = client.post("/api/checklist-templates", json={
        "nome": "Pneus",
        "itens": [
            {"id": 1, "pergunta": "A", "tipo_resposta": "texto"},
            {"id": 1, "pergunta": "B", "tipo_resposta": "texto"},
        ],
    })
    assert res.status_code == 422


def test_checklist_and_closing_flow(db, client, make_order):
    res = client.post("/api/checklist-templates", json=TEMPLATE)
    assert res.status_code == 201
    template = res.json()
    assert [i["id"] for i in template["itens"]] == [1, 2]
    assert client.get(f"/api/checklist-templates/{template['id']}").status_code == 200
    assert len(client.get("/api/checklist-templates").json()) == 1

    ordem_id = make_order()
    res = client.post("/api/checklists", json={"template_id": template["id"], "ordem_servico_id": ordem_id, "veiculo_id": 7})
    assert res.status_code == 201
    checklist = res.json()
    assert checklist["status"] == "iniciado"
    base = f"/api/checklists/{checklist['id']}"

    decision = client.get(f"/api/ordens-servico/{ordem_id}/pode-fechar").json()
    assert decision["pode_fechar"] is False
    assert decision["resultado"] == "bloqueada"

    res = client.post(f"/api/ordens-servico/{ordem_id}/fechar", json={"status_final": "Concluída"})
    assert res.status_code == 409
    assert res.json()["detail"]["motivos_impedimento"] == ["Checklist obrigatório não finalizado"]

    res = client.post(f"{base}/respostas", json={"respostas": [{"item_id": 2, "resposta": 0}]})
    assert res.status_code == 200
    assert res.json()["status"] == "em_andamento"

    res = client.post(f"{base}/respostas", json={"respostas": [{"item_id": 1, "resposta": "  "}]})
    assert res.status_code == 422

    res = client.post(f"{base}/respostas", content='{"respostas": [{"item_id": 2, "resposta": ' + "9" * 400 + '}]}',
                      headers={"Content-Type": "application/json"})
    assert res.status_code == 422

    res = client.post(f"{base}/finalizar", json={})
    assert res.status_code == 422
    assert res.json()["detail"]["total_pendentes"] == 1

    res = client.post(f"{base}/finalizar", json={"respostas": [{"item_id": 1, "resposta": "sim"}]})
    assert res.status_code == 200
    assert res.json()["status"] == "finalizado"

    detail = client.get(base).json()
    assert {r["item_id"]: r["resposta"] for r in detail["respostas"]} == {1: True, 2: 0}
    assert detail["progresso"] == {"respondidas": 2, "obrigatorias": 1, "obrigatorias_pendentes": 0}

    res = client.post(f"{base}/respostas", json={"respostas": [{"item_id": 2, "resposta": 10}]})
    assert res.status_code == 409

    assert client.get(f"/api/ordens-servico/{ordem_id}/pode-fechar").json()["pode_fechar"] is True
    res = client.post(f"/api/ordens-servico/{ordem_id}/fechar", json={"status_final": "Concluída"})
    assert res.status_code == 200
    assert res.json()["statusOrdemServico"]["nome"] == "Concluída"

    res = client.post(f"/api/ordens-servico/{ordem_id}/fechar", json={"status_final": "Cancelada"})
    assert res.status_code == 409
    assert client.get(f"/api/ordens-servico/{ordem_id}/pode-fechar").json()["resultado"] == "ja_fechada"

    listed = client.get("/api/checklists", params={"status": "finalizado", "veiculo_id": 7}).json()
    assert listed["total"] == 1
    assert listed["items"][0]["id"] == checklist["id"]


def test_order_endpoints(db, client, make_order):
    ordem_id = make_order()
    res = client.patch(f"/api/ordens-servico/{ordem_id}", json={"checklist_obrigatorio": True})
    assert res.status_code == 200
    assert res.json()["checklist_obrigatorio"] is True

    res = client.post(f"/api/ordens-servico/{ordem_id}/fechar", json={"status_final": "Finalizada"})
    assert res.status_code == 422

    res = client.post(f"/api/ordens-servico/{ordem_id}/fechar",
                      json={"status_final": "Cancelada", "confirmar_impedimentos": True})
    assert res.status_code == 200
    assert res.json()["impedimentos_ignorados"] == ["Checklist obrigatório não iniciado"]
    assert client.get(f"/api/ordens-servico/{ordem_id}").json()["status"] == "Cancelada"


def test_other_tenant_is_not_found(db, client, make_order, make_template):
    assert client.get(f"/api/ordens-servico/{make_order(empresa='2')}/pode-fechar").status_code == 404
    res = client.post("/api/checklists", json={"template_id": make_template(empresa="2")})
    assert res.status_code == 404


def test_page_size_limit(db, client):
    assert client.get("/api/checklists", params={"page_size": 500}).status_code == 422


def test_login_and_me(db):
    run(db.users.insert_one({
        "id": "user-3", "nome": "Gerente", "email": "gerente@oficina.com", "empresa_mae_id": EMPRESA,
        "role": "admin", "senha_hash": hash_password("segredo123"),
    }))
    c = TestClient(app)
    assert c.post("/api/auth/login", json={"email": "gerente@oficina.com", "senha": "errada"}).status_code == 401

    res = c.post("/api/auth/login", json={"email": "Gerente@Oficina.com", "senha": "segredo123"})
    assert res.status_code == 200
    body = res.json()
    assert "senha_hash" not in body["user"]

    me = c.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}).json()
    assert me["email"] == "gerente@oficina.com"

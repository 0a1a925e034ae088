import pytest

from sisdiesel.core.errors import InvalidAnswerError
from sisdiesel.models.checklist import ChecklistTemplateItem, RespostaIn
from sisdiesel.services.checklist_service import coerce_resposta, is_empty, normalize_answers


def item(tipo, **kw):
    return ChecklistTemplateItem(id=kw.pop("id", 1), pergunta="Pergunta", tipo_resposta=tipo, **kw)


def test_zero_and_false_are_not_empty():
    assert not is_empty(0)
    assert not is_empty(False)
    assert is_empty(None)
    assert is_empty("   ")


def test_numeric_zero_is_a_valid_answer():
    assert coerce_resposta(item("numerico"), 0) == 0
    assert coerce_resposta(item("numerico"), "12,5") == 12.5
    assert coerce_resposta(item("numerico"), "7") == 7


def test_numeric_rejects_booleans_and_garbage():
    with pytest.raises(InvalidAnswerError):
        coerce_resposta(item("numerico"), True)
    with pytest.raises(InvalidAnswerError):
        coerce_resposta(item("numerico"), "abc")
    with pytest.raises(InvalidAnswerError):
        coerce_resposta(item("numerico"), "nan")


def test_sim_nao_accepts_booleans_and_labels():
    assert coerce_resposta(item("sim_nao"), False) is False
    assert coerce_resposta(item("sim_nao"), "Sim") is True
    assert coerce_resposta(item("sim_nao"), "não") is False
    with pytest.raises(InvalidAnswerError):
        coerce_resposta(item("sim_nao"), 1)


def test_multipla_escolha_must_match_an_option():
    it = item("multipla_escolha", opcoes=["Bom", "Regular", "Ruim"])
    assert coerce_resposta(it, "Regular") == "Regular"
    with pytest.raises(InvalidAnswerError):
        coerce_resposta(it, "Ótimo")


def test_texto_requires_string():
    assert coerce_resposta(item("texto"), "  pneu careca ") == "pneu careca"
    with pytest.raises(InvalidAnswerError):
        coerce_resposta(item("texto"), 3)


def test_normalize_drops_empty_answers_and_keeps_last_per_item():
    itens = {1: item("texto", id=1), 2: item("numerico", id=2)}
    out = normalize_answers(itens, [
        RespostaIn(item_id=1, resposta=""),
        RespostaIn(item_id=2, resposta=0),
        RespostaIn(item_id=2, resposta=5, observacao="medido de novo"),
        RespostaIn(item_id=99, resposta=None),
    ])
    assert out == [{"item_id": 2, "resposta": 5, "observacao": "medido de novo"}]


def test_normalize_rejects_unknown_items():
    with pytest.raises(InvalidAnswerError):
        normalize_answers({1: item("texto", id=1)}, [RespostaIn(item_id=42, resposta="x")])


def test_numeric_must_fit_in_64_bits():
    with pytest.raises(InvalidAnswerError):
        coerce_resposta(item("numerico"), 10**400)
    with pytest.raises(InvalidAnswerError):
        coerce_resposta(item("numerico"), 2**63)
    with pytest.raises(InvalidAnswerError):
        coerce_resposta(item("numerico"), "1e400")
    assert coerce_resposta(item("numerico"), -2**63) == -2**63


def test_large_numeric_strings_stay_float():
    value = coerce_resposta(item("numerico"), "1e20")
    assert isinstance(value, float)
    assert value == 1e20
    assert coerce_resposta(item("numerico"), "1e3") == 1000
    assert isinstance(coerce_resposta(item("numerico"), "1e3"), int)

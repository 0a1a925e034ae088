import pytest
from fastapi import HTTPException

from sisdiesel.core.errors import ChecklistClosedError
from sisdiesel.models.common import ALLOWED_TRANSITIONS
from sisdiesel.services.checklist_service import derive_status, ensure_transition

ALL_STATUSES = set(ALLOWED_TRANSITIONS.keys())


def test_allow_list_accepts_whitelisted_transitions():
    """Toda transição listada explicitamente deve ser aceita."""
    for old_status, allowed_destinations in ALLOWED_TRANSITIONS.items():
        for new_status in allowed_destinations:
            ensure_transition(old_status, new_status)


def test_backward_transitions_are_rejected():
    """O ciclo de vida só anda para frente."""
    with pytest.raises(HTTPException) as exc:
        ensure_transition("em_andamento", "iniciado")
    assert exc.value.status_code == 400
    assert exc.value.detail == "Transição não permitida: em_andamento → iniciado"


def test_finalizado_has_no_exits():
    """Checklist finalizado rejeita qualquer mudança com ChecklistClosedError."""
    assert ALLOWED_TRANSITIONS["finalizado"] == set()
    for candidate in ALL_STATUSES:
        with pytest.raises(ChecklistClosedError):
            ensure_transition("finalizado", candidate)


def test_status_is_monotonic():
    assert derive_status("iniciado", has_answers=False) == "iniciado"
    assert derive_status("iniciado", has_answers=True) == "em_andamento"
    assert derive_status("em_andamento", has_answers=True) == "em_andamento"
    assert derive_status("finalizado", has_answers=True) == "finalizado"

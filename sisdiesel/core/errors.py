# sisdiesel/core/errors.py
"""
Erros tipados do núcleo de checklists e fechamento de ordens.

Todos derivam de HTTPException: os serviços levantam o erro e o FastAPI
devolve o status/detail sem handlers adicionais. Cada `detail` é a mensagem
que a UI mostra no toast.
"""
from typing import Any, Dict, List, Optional
from fastapi import HTTPException


class SisDieselError(HTTPException):
    status_code = 400
    message = "Erro ao processar a solicitação"

    def __init__(self, detail: Any = None):
        super().__init__(status_code=self.status_code, detail=detail if detail is not None else self.message)


# --- entidades inexistentes ---

class ChecklistNotFoundError(SisDieselError):
    status_code = 404
    message = "Checklist não encontrado"


class ChecklistTemplateNotFoundError(SisDieselError):
    status_code = 404
    message = "Template de checklist não encontrado"


class ServiceOrderNotFoundError(SisDieselError):
    status_code = 404
    message = "Ordem de serviço não encontrada"


# --- checklist ---

class ChecklistClosedError(SisDieselError):
    status_code = 409
    message = "Checklist já finalizado e não pode mais ser editado"


class IncompleteRequiredAnswersError(SisDieselError):
    status_code = 422

    def __init__(self, pendentes: List[Dict[str, Any]]):
        self.pendentes = pendentes
        total = len(pendentes)
        super().__init__({
            "message": f"Há {total} pergunta(s) obrigatória(s) que precisa(m) ser respondida(s).",
            "total_pendentes": total,
            "itens_pendentes": pendentes,
        })


class InvalidAnswerError(SisDieselError):
    status_code = 422
    message = "Resposta inválida"


class EmptySubmissionError(SisDieselError):
    status_code = 422
    message = "Nenhuma resposta para salvar. Preencha pelo menos uma resposta antes de salvar."


class InvalidTemplateError(SisDieselError):
    status_code = 422
    message = "Template de checklist inválido"


class ChecklistAlreadyLinkedError(SisDieselError):
    status_code = 409
    message = "A ordem de serviço já possui um checklist vinculado"


# --- ordem de serviço ---

class InvalidTerminalStatusError(SisDieselError):
    status_code = 422

    def __init__(self, status_final: Optional[str]):
        self.status_final = status_final
        super().__init__(f"Status final inválido: {status_final}. Use 'Concluída' ou 'Cancelada'.")


class OrderAlreadyClosedError(SisDieselError):
    status_code = 409
    message = "Ordem de serviço já está fechada e não pode mais ser alterada"


class OrderClosingBlockedError(SisDieselError):
    status_code = 409

    def __init__(self, motivos: List[str], enforcing: bool = False):
        self.motivos = list(motivos)
        msg = "A ordem de serviço possui impedimentos para o fechamento"
        if not enforcing:
            msg += "; confirme os impedimentos para fechar mesmo assim"
        super().__init__({"message": msg, "motivos_impedimento": self.motivos})


# --- infraestrutura ---

class ConcurrentUpdateError(SisDieselError):
    status_code = 409
    message = "Registro em uso por outra operação, tente novamente"


class TransportError(SisDieselError):
    status_code = 502

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Falha de comunicação com o banco de dados: {message}")

# sisdiesel/models/ordem_servico.py
from pydantic import BaseModel, Field
from typing import Optional, List
from sisdiesel.models.common import ClosingResult


class ClosingDecision(BaseModel):
    resultado: ClosingResult
    pode_fechar: bool
    tem_checklist: bool
    checklist_finalizado: Optional[bool] = None
    checklist_id: Optional[str] = None
    status_atual: str
    motivos_impedimento: List[str] = Field(default_factory=list)


class FecharOrdemPayload(BaseModel):
    # validado no serviço para devolver InvalidTerminalStatusError em vez de 422 genérico
    status_final: str
    observacoes_fechamento: Optional[str] = None
    confirmar_impedimentos: bool = False


class OrdemServicoUpdate(BaseModel):
    nome: Optional[str] = None
    observacoes: Optional[str] = None
    checklist_obrigatorio: Optional[bool] = None

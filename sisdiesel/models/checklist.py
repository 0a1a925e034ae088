# sisdiesel/models/checklist.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Union
from sisdiesel.models.common import ChecklistStatus, TipoResposta

# Valor bruto vindo da UI; a tipagem real depende do tipo_resposta do item
RespostaValor = Union[bool, int, float, str, None]


class ChecklistTemplateItem(BaseModel):
    id: int
    pergunta: str
    tipo_resposta: TipoResposta
    obrigatoria: bool = False
    opcoes: Optional[List[str]] = None
    ordem: int = 0


class ChecklistTemplateItemCreate(BaseModel):
    id: Optional[int] = None
    pergunta: str = Field(min_length=1)
    tipo_resposta: TipoResposta
    obrigatoria: bool = False
    opcoes: Optional[List[str]] = None
    ordem: Optional[int] = None


class ChecklistTemplateCreate(BaseModel):
    nome: str = Field(min_length=1)
    descricao: Optional[str] = None
    itens: List[ChecklistTemplateItemCreate] = Field(default_factory=list)


class ChecklistStart(BaseModel):
    template_id: str
    veiculo_id: Optional[int] = None
    funcionario_id: Optional[int] = None
    ordem_servico_id: Optional[str] = None
    observacoes: Optional[str] = None


class RespostaIn(BaseModel):
    item_id: int
    resposta: RespostaValor = None
    observacao: Optional[str] = None


class SalvarRespostasPayload(BaseModel):
    respostas: List[RespostaIn] = Field(default_factory=list)


class FinalizarPayload(BaseModel):
    # respostas ainda não salvas na tela; são gravadas junto com a finalização
    respostas: List[RespostaIn] = Field(default_factory=list)


class ChecklistProgresso(BaseModel):
    respondidas: int
    obrigatorias: int
    obrigatorias_pendentes: int


class Checklist(BaseModel):
    id: str
    empresa_mae_id: str
    template_id: str
    veiculo_id: Optional[int] = None
    funcionario_id: Optional[int] = None
    ordem_servico_id: Optional[str] = None
    status: ChecklistStatus = "iniciado"
    data_inicio: datetime
    data_finalizacao: Optional[datetime] = None
    observacoes: Optional[str] = None
    iniciado_por_id: Optional[str] = None
    version: int = 0

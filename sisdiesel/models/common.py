# sisdiesel/models/common.py
from typing import Literal

ChecklistStatus = Literal["iniciado", "em_andamento", "finalizado"]
TipoResposta = Literal["sim_nao", "texto", "numerico", "multipla_escolha"]
ClosingResult = Literal["ja_fechada", "bloqueada", "liberada"]

ALLOWED_TRANSITIONS = {
  "iniciado": {"em_andamento", "finalizado"},
  "em_andamento": {"finalizado"},
  "finalizado": set(),
}

# statusOrdemServico.nome que caracterizam uma OS fechada
STATUS_FECHADOS = {"Concluída", "Cancelada", "Finalizada"}
# status aceitos no fechamento
STATUS_FINAIS = ("Concluída", "Cancelada")

MOTIVO_CHECKLIST_NAO_FINALIZADO = "Checklist obrigatório não finalizado"
MOTIVO_CHECKLIST_NAO_INICIADO = "Checklist obrigatório não iniciado"

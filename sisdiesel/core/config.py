# sisdiesel/core/config.py
from typing import List, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === MongoDB ===
    mongo_url: str = "mongodb://localhost:27017"
    db_name: str = "sisdiesel"
    mongo_tls: bool = False

    # === Segurança / JWT ===
    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 600

    # === Login (anti brute-force) ===
    login_rate_limit: str = "5/minute"

    # === CORS ===
    # Aceita JSON (["http://a","https://b"]) ou lista separada por vírgulas ("http://a,https://b")
    cors_origins: Union[str, List[str]] = ""

    # === Paginação ===
    max_page_size: int = 50

    # === Fechamento de ordens ===
    # False: o gate é consultivo (o operador pode confirmar os impedimentos e fechar mesmo assim)
    closing_gate_enforcing: bool = False

    # === Locks por registro ===
    lock_ttl_seconds: float = 30.0
    lock_wait_seconds: float = 5.0
    lock_poll_interval: float = 0.05

    # === Seed de desenvolvimento ===
    seed_admin: bool = False
    seed_admin_email: str = "admin@sisdiesel.local"
    seed_admin_password: str = "admin123"
    seed_empresa_mae_id: str = "1"

    log_level: str = "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return []
            if s.startswith("["):
                try:
                    data = json.loads(s)
                    if isinstance(data, list):
                        return [str(x).strip() for x in data if str(x).strip()]
                except ValueError:
                    # parece JSON mas está malformado: cai no split por vírgulas
                    pass
            return [item.strip() for item in s.split(",") if item.strip()]
        return [str(v).strip()] if str(v).strip() else []


# Instância global usada pelo app, serviços e repositórios
settings = Settings()

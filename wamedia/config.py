from __future__ import annotations

import ast
from typing import Annotated, Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _parse_list(value: Any) -> List[str]:
    """
    Aceita:
      • string “a,b,c”
      • string '["a","b"]'
      • lista real
    Retorna sempre list[str] sem espaços nem vazios.
    """
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]

    if isinstance(value, str) and value:
        value = value.strip()
        try:
            parsed = ast.literal_eval(value)
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]
        except (ValueError, SyntaxError):
            pass
        return [item.strip() for item in value.split(",") if item.strip()]

    return []


class Settings(BaseSettings):
    """
    Configurações do serviço de descriptografia de mídia.
    Carrega variáveis do sistema + arquivo `.env`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ───────────────────── App / Runtime ──────────────────────
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")
    APP_VERSION: str = "1.0.0"

    # ───────────────────── HTTP ──────────────────────
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])
    MAX_REQUEST_BYTES: int = 10 * 1024 * 1024

    # 100 requisições por IP a cada 15 minutos
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    # ───────────────────── Download da mídia ──────────────────────
    DOWNLOAD_TIMEOUT_SECONDS: float = 30.0
    DOWNLOAD_MAX_RETRIES: int = 3
    MAX_MEDIA_BYTES: int = 100 * 1024 * 1024

    # Usa "WhatsApp Audio Keys" etc. em vez de "WhatsApp Media Keys"
    USE_MEDIA_TYPE_INFO: bool = False

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _to_list(cls, v: Any) -> List[str]:
        return _parse_list(v)

    @field_validator(
        "MAX_REQUEST_BYTES",
        "RATE_LIMIT_MAX_REQUESTS",
        "RATE_LIMIT_WINDOW_SECONDS",
        "DOWNLOAD_MAX_RETRIES",
        "MAX_MEDIA_BYTES",
        mode="before",
    )
    @classmethod
    def _to_int(cls, v: Any) -> int:
        """
        Permite que limites venham como string, converte para int.
        """
        if isinstance(v, int):
            return v
        if isinstance(v, str) and v.strip().isdigit():
            return int(v)
        raise ValueError("deve ser número inteiro")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()

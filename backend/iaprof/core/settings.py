from __future__ import annotations
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import RateLimitConstants


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Chave e modelos do Gemini (um por perfil de custo)
    GEMINI_API_KEY: str = ""
    GEMINI_FLASH_MODEL: str = "gemini-3-flash-preview"
    GEMINI_PRO_MODEL: str = "gemini-3-pro-preview"
    GEMINI_IMAGE_MODEL: str = "gemini-2.5-flash-image"

    # Rate limiting por IP (formato do slowapi)
    RATE_LIMIT_ENABLED: bool = True
    SESSION_RATE_LIMIT: str = RateLimitConstants.SESSION_RATE_LIMIT
    AI_RATE_LIMIT: str = RateLimitConstants.AI_RATE_LIMIT
    IMAGE_RATE_LIMIT: str = RateLimitConstants.IMAGE_RATE_LIMIT

    CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Sessões mantidas em memória antes de descartar as mais antigas
    MAX_SESSIONS: int = 1000


_settings_singleton: Settings | None = None

def get_settings() -> Settings:
    global _settings_singleton
    if _settings_singleton is None:
        _settings_singleton = Settings()
    return _settings_singleton

settings = get_settings()

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./docvault.db"
    database_echo: bool = False
    # Коллекция, к которой привязан фасад
    collection: str = "_default"

    host: str = "127.0.0.1"
    port: int = 9999
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    service_name: str = "DocVault"
    service_version: str = "1.0.0"
    max_document_bytes: int = 20 * 1024 * 1024  # 20MB

    model_config = {"env_file": ".env", "extra": "ignore", "env_prefix": "DOCVAULT_"}


@lru_cache
def get_settings() -> Settings:
    """Настройки процесса (читаются один раз)"""
    return Settings()

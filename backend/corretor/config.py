"""Configurações da aplicação - carrega variáveis do .env"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",  # carrega local
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    # ===========================================
    # CORE
    # ===========================================
    environment: str = "development"
    database_url: str
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: List[str] = ["*"]

    # ===========================================
    # BANCO
    # ===========================================
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_echo: bool = False

    # ===========================================
    # AUTH (tokens emitidos pelo provedor de identidade)
    # ===========================================
    secret_key: str
    jwt_algorithm: str = "HS256"

    # ===========================================
    # OPENAI
    # ===========================================
    llm_provider: str = "openai"
    openai_api_key: str
    openai_model: str = "gpt-4o-mini"         # enriquecimento
    openai_chat_model: str = "gpt-4-turbo"    # assistente do corretor
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536

    # ===========================================
    # ASSISTENTE
    # ===========================================
    chat_max_steps: int = 10
    chat_max_tokens: int = 1000

    # ===========================================
    # PROPRIEDADES
    # ===========================================
    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def async_database_url(self) -> str:
        """URL no formato do driver asyncpg."""
        # Provedores entregam postgresql:// mas asyncpg precisa de postgresql+asyncpg://
        url = self.database_url
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        return url


@lru_cache
def get_settings() -> Settings:
    return Settings()

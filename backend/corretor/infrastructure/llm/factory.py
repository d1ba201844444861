import logging
from typing import Dict, Optional, Type

from corretor.config import get_settings
from .interface import LLMProvider
from .openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

PROVIDERS: Dict[str, Type[LLMProvider]] = {
    "openai": OpenAIProvider,
}


class LLMFactory:
    """
    Guarda o provedor LLM compartilhado por enriquecimento, embeddings e chat.
    """

    _instance: Optional[LLMProvider] = None

    @staticmethod
    def get_provider(provider_type: Optional[str] = None) -> LLMProvider:
        """Instância única; o tipo padrão vem de settings.llm_provider."""
        if LLMFactory._instance:
            return LLMFactory._instance

        name = (provider_type or get_settings().llm_provider).lower()
        provider_cls = PROVIDERS.get(name)
        if not provider_cls:
            raise ValueError(f"Provedor LLM desconhecido: {name}")

        logger.info(f"🧠 Inicializando provedor LLM: {name}")
        LLMFactory._instance = provider_cls()
        return LLMFactory._instance

    @staticmethod
    def set_provider(provider: LLMProvider) -> None:
        """Injeta um provedor pronto (testes e scripts)."""
        LLMFactory._instance = provider

    @staticmethod
    def reset() -> None:
        LLMFactory._instance = None

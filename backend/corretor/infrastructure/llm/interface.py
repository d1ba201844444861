from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union


class LLMProvider(ABC):
    """
    Contrato dos provedores de LLM usados pelo backend.

    Dois usos:
    - chat_completion: enriquecimento (JSON mode) e assistente (function calling)
    - generate_embeddings: vetores para a busca semântica
    """

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[Union[str, Dict[str, Any]]] = None,
        response_format: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Retorna {"content", "tokens_used", "tool_calls", "finish_reason"}.

        tool_calls vem no formato da API de chat:
        [{"id", "type": "function", "function": {"name", "arguments"}}],
        com arguments como string JSON.
        """

    @abstractmethod
    async def generate_embeddings(self, text: str, model: Optional[str] = None) -> Dict[str, Any]:
        """Retorna {"embedding": List[float], "tokens_used": int}."""

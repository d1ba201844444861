import logging
from typing import List, Dict, Any, Optional, Union
from openai import AsyncOpenAI
from corretor.config import get_settings
from .interface import LLMProvider

logger = logging.getLogger(__name__)
settings = get_settings()


class OpenAIProvider(LLMProvider):
    """
    Implementação do provedor OpenAI usando a lib oficial.
    """

    def __init__(self, api_key: str = None):
        self.api_key = api_key or settings.openai_api_key
        self.client = AsyncOpenAI(api_key=self.api_key)
        self.default_model = settings.openai_model
        self.embedding_model = settings.embedding_model
        self.embedding_dimensions = settings.embedding_dimensions

    async def chat_completion(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        tools: Optional[List[Dict]] = None,
        tool_choice: Optional[Union[str, Dict]] = None,
        response_format: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "model": model or self.default_model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens:
            params["max_tokens"] = max_tokens
        if tools:
            params["tools"] = tools
            params["tool_choice"] = tool_choice or "auto"
        if response_format:
            params["response_format"] = response_format

        try:
            response = await self.client.chat.completions.create(**params)
        except Exception as e:
            logger.error(f"Erro na chamada OpenAI: {e}")
            raise

        choice = response.choices[0]
        tool_calls = None
        if choice.message.tool_calls:
            tool_calls = [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {
                        "name": tc.function.name,
                        "arguments": tc.function.arguments,
                    },
                }
                for tc in choice.message.tool_calls
            ]

        return {
            "content": choice.message.content,
            "tokens_used": response.usage.total_tokens if response.usage else 0,
            "tool_calls": tool_calls,
            "finish_reason": choice.finish_reason,
        }

    async def generate_embeddings(self, text: str, model: Optional[str] = None) -> Dict[str, Any]:
        """Gera embeddings usando OpenAI API."""
        try:
            response = await self.client.embeddings.create(
                input=text,
                model=model or self.embedding_model,
                dimensions=self.embedding_dimensions,
                encoding_format="float",
            )
        except Exception as e:
            logger.error(f"Erro ao gerar embeddings OpenAI: {e}")
            raise

        return {
            "embedding": response.data[0].embedding,
            "tokens_used": response.usage.total_tokens if response.usage else 0,
        }

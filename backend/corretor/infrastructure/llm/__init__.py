from .interface import LLMProvider
from .openai_provider import OpenAIProvider
from .factory import LLMFactory

__all__ = ["LLMProvider", "OpenAIProvider", "LLMFactory"]

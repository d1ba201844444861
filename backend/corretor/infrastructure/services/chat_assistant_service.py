"""
ASSISTENTE DO CORRETOR - Loop de Function Calling
=================================================

Recebe o histórico do chat, chama o modelo com as tools disponíveis e
executa as chamadas até a IA responder em texto (máximo de 10 passos).

Fluxo de cada passo:
1. Chama o LLM (tool_choice="auto")
2. Se vierem tool_calls: registra a mensagem do assistente, executa cada tool
   e devolve o resultado como mensagem role="tool"
3. Se vier texto: encerra
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.config import get_settings
from corretor.domain.entities import AIConversation, Client, ConversationType, User
from corretor.domain.prompts.chat_prompts import build_system_prompt
from corretor.infrastructure.llm import LLMFactory
from corretor.infrastructure.services.ai_tools import (
    AVAILABLE_TOOLS,
    ToolContext,
    execute_tool,
)

logger = logging.getLogger(__name__)
settings = get_settings()

WELCOME_MESSAGE_ID = "welcome"


@dataclass
class ChatResult:
    text: str
    steps: int = 0
    tool_calls: List[Dict[str, Any]] = field(default_factory=list)
    tokens_used: int = 0


def _message_text(message: Dict[str, Any]) -> str:
    """Texto da mensagem da UI: content direto ou partes do tipo 'text'."""
    content = message.get("content")
    if isinstance(content, str):
        return content

    parts = message.get("parts") or []
    return "".join(
        part.get("text", "")
        for part in parts
        if isinstance(part, dict) and part.get("type") == "text"
    )


def filter_ui_messages(messages: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Remove a mensagem de boas-vindas e converte para o formato do modelo."""
    converted: List[Dict[str, str]] = []

    for message in messages:
        if message.get("id") == WELCOME_MESSAGE_ID:
            continue

        role = message.get("role")
        if role not in ("user", "assistant", "system"):
            continue

        converted.append({"role": role, "content": _message_text(message)})

    return converted


def collect_property_ids(tool_name: str, result: Any) -> List[str]:
    """IDs de imóveis citados no resultado de uma tool."""
    if isinstance(result, dict) and result.get("error"):
        return []

    if tool_name == "searchProperties" and isinstance(result, list):
        return [str(p["id"]) for p in result if isinstance(p, dict) and p.get("id")]

    if tool_name == "findPropertiesForClient" and isinstance(result, dict):
        return [str(p["id"]) for p in result.get("properties", []) if p.get("id")]

    if tool_name == "getPropertyDetails" and isinstance(result, dict) and result.get("id"):
        return [str(result["id"])]

    return []


class ChatAssistantService:
    """
    Assistente imobiliário com acesso às ferramentas do CRM.
    """

    def __init__(self, db: AsyncSession, agent: Optional[User] = None, max_steps: Optional[int] = None):
        self.db = db
        self.agent = agent
        self.max_steps = max_steps or settings.chat_max_steps
        self.related_property_ids: List[str] = []

    async def load_client(self, client_id: Any) -> Optional[Client]:
        """Cliente ativo (não removido) para injetar no prompt."""
        try:
            result = await self.db.execute(
                select(Client).where(Client.id == client_id, Client.not_deleted())
            )
            return result.scalar_one_or_none()
        except Exception as e:
            logger.warning(f"⚠️ Não foi possível carregar o cliente {client_id}: {e}")
            return None

    async def run(self, ui_messages: List[Dict[str, Any]], client: Optional[Client] = None) -> ChatResult:
        """Executa o loop de tools até a resposta em texto."""
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": build_system_prompt(client)},
            *filter_ui_messages(ui_messages),
        ]

        logger.info(f"📨 Chat com {len(messages) - 1} mensagens (cliente: {client.id if client else None})")

        provider = LLMFactory.get_provider()
        ctx = ToolContext(db=self.db, agent=self.agent)
        result = ChatResult(text="")

        for step in range(1, self.max_steps + 1):
            response = await provider.chat_completion(
                messages=messages,
                model=settings.openai_chat_model,
                tools=AVAILABLE_TOOLS,
                tool_choice="auto",
                max_tokens=settings.chat_max_tokens,
            )

            result.steps = step
            result.tokens_used += response.get("tokens_used", 0)
            tool_calls = response.get("tool_calls")

            if not tool_calls:
                result.text = response.get("content") or ""
                logger.info(f"📍 Passo {step}: resposta em texto ({len(result.text)} chars)")
                break

            logger.info(
                f"📍 Passo {step}: tools {[tc['function']['name'] for tc in tool_calls]}"
            )

            messages.append({
                "role": "assistant",
                "content": response.get("content") or "",
                "tool_calls": tool_calls,
            })

            for tool_call in tool_calls:
                function_name = tool_call["function"]["name"]
                try:
                    function_args = json.loads(tool_call["function"].get("arguments") or "{}")
                except json.JSONDecodeError:
                    function_args = None

                if function_args is None:
                    tool_result: Any = {"error": f"Argumentos inválidos para {function_name}"}
                else:
                    tool_result = await execute_tool(function_name, function_args, ctx)

                result.tool_calls.append({"toolName": function_name, "args": function_args})
                self.related_property_ids.extend(collect_property_ids(function_name, tool_result))

                messages.append({
                    "role": "tool",
                    "tool_call_id": tool_call["id"],
                    "name": function_name,
                    "content": json.dumps(tool_result, ensure_ascii=False, default=str),
                })
        else:
            logger.warning(f"⚠️ Limite de {self.max_steps} passos atingido sem resposta final")

        logger.info(
            f"✅ Chat finalizado: {result.steps} passos, {len(result.tool_calls)} tools, "
            f"{result.tokens_used} tokens"
        )
        return result

    async def save_conversation(
        self,
        ui_messages: List[Dict[str, Any]],
        result: ChatResult,
        client: Optional[Client] = None,
    ) -> AIConversation:
        """Grava a troca em ai_conversations."""
        history = filter_ui_messages(ui_messages)
        history.append({"role": "assistant", "content": result.text})

        conversation = AIConversation(
            user_id=self.agent.id if self.agent else None,
            client_id=client.id if client else None,
            conversation_type=(ConversationType.CLIENT if client else ConversationType.GENERAL).value,
            messages=history,
            related_property_ids=list(dict.fromkeys(self.related_property_ids)),
            extra_metadata={
                "steps": result.steps,
                "tool_calls": [tc["toolName"] for tc in result.tool_calls],
                "tokens_used": result.tokens_used,
                "model": settings.openai_chat_model,
            },
        )
        self.db.add(conversation)
        await self.db.flush()
        return conversation

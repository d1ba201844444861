"""
API Routes: Chat do Corretor
=============================

Assistente com function calling sobre o CRM imobiliário.
Cada troca é gravada em ai_conversations.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.api.dependencies import get_current_user
from corretor.domain.entities import User
from corretor.infrastructure.database import get_db
from corretor.infrastructure.services.chat_assistant_service import ChatAssistantService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


# =============================================================================
# SCHEMAS
# =============================================================================

class ChatRequest(BaseModel):
    messages: List[Dict[str, Any]] = Field(default_factory=list)
    clientId: Optional[str] = None


class ChatResponse(BaseModel):
    text: str
    steps: int
    toolCalls: List[Dict[str, Any]]


# =============================================================================
# ENDPOINT
# =============================================================================

@router.post("", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Processa o histórico e devolve a resposta final do assistente."""
    logger.info(f"📨 Chat recebido: {len(payload.messages)} mensagens, clientId: {payload.clientId}")

    result = await db.execute(select(User).where(User.auth_id == user["sub"]))
    agent = result.scalar_one_or_none()

    service = ChatAssistantService(db, agent=agent)

    client = None
    if payload.clientId:
        try:
            client = await service.load_client(uuid.UUID(payload.clientId))
        except ValueError:
            logger.warning(f"⚠️ clientId inválido: {payload.clientId}")

    try:
        chat_result = await service.run(payload.messages, client=client)
        await service.save_conversation(payload.messages, chat_result, client=client)
    except Exception as e:
        logger.error(f"❌ Erro no chat: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    return ChatResponse(
        text=chat_result.text,
        steps=chat_result.steps,
        toolCalls=chat_result.tool_calls,
    )

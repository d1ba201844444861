"""
AI CONVERSATIONS - Histórico do assistente
==========================================

Cada troca com o assistente do corretor é gravada com as mensagens,
o cliente em contexto e os imóveis citados pelas ferramentas.
"""
import uuid
from typing import Optional, List
from sqlalchemy import String, ForeignKey, ARRAY
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.ext.mutable import MutableList, MutableDict
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from .enums import ConversationType


class AIConversation(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "ai_conversations"

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    client_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True
    )
    conversation_type: Mapped[Optional[str]] = mapped_column(
        String(20), default=ConversationType.GENERAL.value
    )
    messages: Mapped[list] = mapped_column(MutableList.as_mutable(JSONB), default=list, nullable=False)
    related_property_ids: Mapped[Optional[List[str]]] = mapped_column(ARRAY(String), default=list)
    extra_metadata: Mapped[Optional[dict]] = mapped_column(
        "metadata",
        MutableDict.as_mutable(JSONB),
        default=dict,
        nullable=True
    )

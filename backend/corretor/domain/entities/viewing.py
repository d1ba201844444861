"""Visita agendada a um imóvel."""
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, Text, Boolean, ForeignKey, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from .enums import ViewingStatus, MeetingType


class Viewing(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "viewings"

    property_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("properties.id", ondelete="CASCADE"), index=True
    )
    agent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), index=True
    )
    client_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )

    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    duration_minutes: Mapped[Optional[int]] = mapped_column(Integer, default=60)
    status: Mapped[Optional[str]] = mapped_column(String(20), default=ViewingStatus.SCHEDULED.value, index=True)
    meeting_type: Mapped[Optional[str]] = mapped_column(String(20), default=MeetingType.IN_PERSON.value)
    meeting_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    client_feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    client_rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    agent_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    follow_up_required: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    follow_up_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

"""
Client - Cliente (lead) na carteira do corretor
================================================

Guarda contato, orçamento e preferências de busca. As preferências
também viram embedding para o match semântico com imóveis.
"""
import uuid
from datetime import datetime
from typing import Optional, List, TYPE_CHECKING
from sqlalchemy import String, Integer, Text, Numeric, Float, ForeignKey, DateTime, ARRAY
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, SoftDeleteMixin, UUIDPrimaryKeyMixin
from .enums import ClientStatus, ClientSource

if TYPE_CHECKING:
    from .user import User


class Client(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    """Cliente interessado em comprar ou alugar."""

    __tablename__ = "clients"

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)

    agent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    organization_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)

    status: Mapped[Optional[str]] = mapped_column(String(20), default=ClientStatus.ACTIVE.value, index=True)
    source: Mapped[Optional[str]] = mapped_column(String(30), default=ClientSource.MANUAL.value)

    # Orçamento
    budget_min: Mapped[Optional[float]] = mapped_column(Numeric(15, 2), nullable=True)
    budget_max: Mapped[Optional[float]] = mapped_column(Numeric(15, 2), nullable=True)

    # Preferências
    preferred_neighborhoods: Mapped[Optional[List[str]]] = mapped_column(ARRAY(String), default=list)
    preferred_property_types: Mapped[Optional[List[str]]] = mapped_column(ARRAY(String), default=list)
    min_bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    min_bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    required_features: Mapped[Optional[List[str]]] = mapped_column(ARRAY(String), default=list)
    preferences_embedding: Mapped[Optional[List[float]]] = mapped_column(ARRAY(Float), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    converted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    agent: Mapped[Optional["User"]] = relationship(back_populates="clients")

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name='{self.full_name}', status='{self.status}')>"

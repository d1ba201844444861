"""Perfil do corretor, ligado ao usuário do provedor de identidade via auth_id."""
from typing import Optional, List, TYPE_CHECKING
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .client import Client


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Corretor (agente) que usa a plataforma."""

    __tablename__ = "users"

    auth_id: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default="agent", nullable=False)

    clients: Mapped[List["Client"]] = relationship(back_populates="agent")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"

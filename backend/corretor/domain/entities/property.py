"""
Property - Imóvel (Mercado Imobiliário)
========================================

Catálogo de imóveis disponíveis para venda/locação, importados de portais
(ex: VivaReal) e enriquecidos por IA.

Campos principais:
- Tipo e modalidade (apartamento/casa/... + rent/sale)
- Localização (endereço, bairro, cidade, UF, coordenadas)
- Detalhes (m², quartos, banheiros, suítes, vagas)
- Valores (aluguel, venda, condomínio, IPTU)
- IA (resumo, destaques, embedding para busca semântica)
"""
from datetime import datetime
from typing import Optional, List
from sqlalchemy import String, Integer, Text, Numeric, Float, Index, DateTime, ARRAY
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.ext.mutable import MutableList

from .base import Base, TimestampMixin, SoftDeleteMixin, UUIDPrimaryKeyMixin
from .enums import PropertyStatus


class Property(Base, UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    """Imóvel disponível no catálogo."""

    __tablename__ = "properties"

    vivareal_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, unique=True)
    source_url: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    # Basic Info
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    property_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    listing_type: Mapped[Optional[str]] = mapped_column(String(10), nullable=True, index=True)
    status: Mapped[Optional[str]] = mapped_column(
        String(20), nullable=True, default=PropertyStatus.ACTIVE.value, index=True
    )

    # Values
    price_monthly: Mapped[Optional[float]] = mapped_column(Numeric(15, 2), nullable=True, index=True)
    price_total: Mapped[Optional[float]] = mapped_column(Numeric(15, 2), nullable=True, index=True)
    condominium_fee: Mapped[Optional[float]] = mapped_column(Numeric(10, 2), nullable=True)
    iptu_annual: Mapped[Optional[float]] = mapped_column(Numeric(10, 2), nullable=True)
    iptu_monthly: Mapped[Optional[float]] = mapped_column(Numeric(10, 2), nullable=True)

    # Details
    area_total: Mapped[Optional[float]] = mapped_column(Numeric(10, 2), nullable=True)
    area_useful: Mapped[Optional[float]] = mapped_column(Numeric(10, 2), nullable=True)
    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    suites: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    parking_spaces: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    floor: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    furnished: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Location
    address_full: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    address_street: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    address_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address_neighborhood: Mapped[Optional[str]] = mapped_column(String(150), nullable=True, index=True)
    address_city: Mapped[Optional[str]] = mapped_column(String(150), nullable=True, index=True)
    address_state: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    address_zipcode: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Numeric(10, 8), nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Numeric(11, 8), nullable=True)

    # Media
    image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    image_alt: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    images: Mapped[Optional[List[str]]] = mapped_column(
        MutableList.as_mutable(JSONB),
        default=list,
        nullable=True
    )

    # Features (JSONB array)
    features: Mapped[Optional[List[str]]] = mapped_column(
        MutableList.as_mutable(JSONB),
        default=list,
        nullable=True
    )

    # IA
    ai_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ai_highlights: Mapped[Optional[list]] = mapped_column(JSONB(none_as_null=True), nullable=True)
    # Embedding: vetor de 1536 dimensões (comparado via pgvector)
    ai_embedding: Mapped[Optional[List[float]]] = mapped_column(ARRAY(Float), nullable=True)

    scraped_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_properties_status_deleted", "status", "deleted_at"),
        Index("ix_properties_type_bedrooms_price", "property_type", "bedrooms", "price_total"),
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, type='{self.property_type}', city='{self.address_city}')>"

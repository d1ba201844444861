"""
API Routes: Properties (Imóveis)
==================================

CRUD de imóveis + enriquecimento com IA + busca semântica.
"""

import logging
import math
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.api.dependencies import get_current_user, get_optional_agent
from corretor.application.helpers.brazilian_formatters import format_area, format_brl
from corretor.domain.entities import Property, PropertyStatus, User
from corretor.infrastructure.database import get_db
from corretor.infrastructure.services.embedding_service import EmbeddingError
from corretor.infrastructure.services.enrichment_service import (
    auto_enrich_properties,
    auto_enrich_property,
)
from corretor.infrastructure.services.semantic_search_service import (
    HybridSearchOptions,
    SemanticSearchError,
    SemanticSearchResult,
    find_similar_properties,
    hybrid_search,
    semantic_search_properties,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/properties", tags=["properties"])


# =============================================================================
# SCHEMAS
# =============================================================================

class PropertyCreate(BaseModel):
    """Criar imóvel."""
    title: str = Field(..., min_length=1, max_length=500)
    source_url: str = ""
    vivareal_id: Optional[str] = None
    description: Optional[str] = None
    property_type: Optional[str] = None
    listing_type: Optional[str] = None
    status: str = PropertyStatus.ACTIVE.value
    price_monthly: Optional[float] = None
    price_total: Optional[float] = None
    condominium_fee: Optional[float] = None
    iptu_annual: Optional[float] = None
    iptu_monthly: Optional[float] = None
    area_total: Optional[float] = None
    area_useful: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    suites: Optional[int] = None
    parking_spaces: Optional[int] = None
    floor: Optional[int] = None
    furnished: Optional[str] = None
    address_full: Optional[str] = None
    address_street: Optional[str] = None
    address_number: Optional[str] = None
    address_neighborhood: Optional[str] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = Field(None, max_length=2)
    address_zipcode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_url: Optional[str] = None
    image_alt: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)


class PropertyResponse(BaseModel):
    """Resposta de imóvel."""
    id: uuid.UUID
    title: str
    source_url: Optional[str] = None
    description: Optional[str] = None
    property_type: Optional[str] = None
    listing_type: Optional[str] = None
    status: Optional[str] = None
    price_monthly: Optional[float] = None
    price_total: Optional[float] = None
    condominium_fee: Optional[float] = None
    iptu_monthly: Optional[float] = None
    area_total: Optional[float] = None
    area_useful: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    suites: Optional[int] = None
    parking_spaces: Optional[int] = None
    furnished: Optional[str] = None
    address_full: Optional[str] = None
    address_neighborhood: Optional[str] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = None
    address_zipcode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_url: Optional[str] = None
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None
    ai_summary: Optional[str] = None
    ai_highlights: Optional[list] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SemanticSearchRequest(BaseModel):
    query: Any = None
    limit: Optional[int] = None
    threshold: Optional[float] = None
    filters: Optional[Dict[str, Any]] = None


# =============================================================================
# HELPERS
# =============================================================================

def format_search_result(result: SemanticSearchResult) -> Dict[str, Any]:
    """Resultado de busca vetorial com valores formatados e similaridade em %."""
    return {
        "id": result.id,
        "title": result.title,
        "description": result.description,
        "ai_summary": result.ai_summary,
        "price_monthly": format_brl(float(result.price_monthly)) if result.price_monthly else None,
        "price_total": format_brl(float(result.price_total)) if result.price_total else None,
        "type": result.property_type,
        "listing_type": result.listing_type,
        "location": (
            f"{result.address_neighborhood or ''}, "
            f"{result.address_city or ''}, {result.address_state or ''}"
        ),
        "bedrooms": result.bedrooms,
        "bathrooms": result.bathrooms,
        "area": format_area(float(result.area_total)) if result.area_total else None,
        "features": result.features,
        "similarity": math.floor(result.similarity * 100 + 0.5),
    }


def build_list_query(
    city: Optional[str] = None,
    state: Optional[str] = None,
    property_type: Optional[str] = None,
    status_filter: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    min_bedrooms: Optional[int] = None,
    max_bedrooms: Optional[int] = None,
) -> Select:
    """Listagem com filtros exatos, mais recentes primeiro."""
    query = select(Property).where(Property.not_deleted())

    # Preço de referência: venda, senão aluguel
    price = func.coalesce(Property.price_total, Property.price_monthly)

    if city:
        query = query.where(Property.address_city == city)
    if state:
        query = query.where(Property.address_state == state)
    if property_type:
        query = query.where(Property.property_type == property_type)
    if status_filter:
        query = query.where(Property.status == status_filter)
    if min_price is not None:
        query = query.where(price >= min_price)
    if max_price is not None:
        query = query.where(price <= max_price)
    if min_bedrooms is not None:
        query = query.where(Property.bedrooms >= min_bedrooms)
    if max_bedrooms is not None:
        query = query.where(Property.bedrooms <= max_bedrooms)

    return query.order_by(Property.created_at.desc())


# =============================================================================
# CRUD ENDPOINTS
# =============================================================================

@router.get("", response_model=List[PropertyResponse])
async def list_properties(
    city: Optional[str] = None,
    state: Optional[str] = None,
    type: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    minPrice: Optional[float] = None,
    maxPrice: Optional[float] = None,
    minBedrooms: Optional[int] = None,
    maxBedrooms: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
):
    """Lista imóveis com filtros."""
    query = build_list_query(
        city=city,
        state=state,
        property_type=type,
        status_filter=status_filter,
        min_price=minPrice,
        max_price=maxPrice,
        min_bedrooms=minBedrooms,
        max_bedrooms=maxBedrooms,
    )
    result = await db.execute(query)
    return result.scalars().all()


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_property(
    payload: PropertyCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cria imóvel."""
    prop = Property(id=uuid.uuid4(), **payload.model_dump())
    db.add(prop)
    await db.flush()
    await db.refresh(prop)

    logger.info(f"🏠 Imóvel criado: {prop.id} por {user['sub']}")
    return prop


# =============================================================================
# IA: ENRIQUECIMENTO E BUSCA SEMÂNTICA
# (rotas estáticas antes de /{property_id})
# =============================================================================

@router.post("/enrich")
async def enrich_properties(
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    agent: Optional[User] = Depends(get_optional_agent),
):
    """
    Dispara o enriquecimento.

    Aberto também para chamadas sem token (importador); quando há corretor
    logado, ele fica registrado no log.

    Body: {"propertyId": "..."} ou {"propertyIds": ["...", ...]}
    """
    requested_by = f"{agent.full_name} ({agent.id})" if agent else "anônimo"
    if payload.get("propertyId"):
        logger.info(f"🤖 Enriquecimento de {payload['propertyId']} solicitado por {requested_by}")
        success = await auto_enrich_property(db, payload["propertyId"])
        return {"success": success, "propertyId": payload["propertyId"]}

    if isinstance(payload.get("propertyIds"), list):
        logger.info(f"🤖 Enriquecimento de {len(payload['propertyIds'])} imóveis solicitado por {requested_by}")
        results = await auto_enrich_properties(db, payload["propertyIds"])
        return {"success": True, "results": results}

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Missing propertyId or propertyIds in request body",
    )


@router.post("/semantic-search")
async def semantic_search(
    payload: SemanticSearchRequest,
    db: AsyncSession = Depends(get_db),
):
    """Busca por linguagem natural; com filtros vira busca híbrida."""
    if not payload.query or not isinstance(payload.query, str):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Query é obrigatório e deve ser uma string",
        )

    limit = payload.limit or 10
    threshold = payload.threshold if payload.threshold is not None else 0.7

    try:
        if payload.filters:
            options = HybridSearchOptions.from_filters(payload.filters, limit=limit, threshold=threshold)
            results = await hybrid_search(db, payload.query, options)
        else:
            results = await semantic_search_properties(db, payload.query, limit=limit, threshold=threshold)
    except (SemanticSearchError, EmbeddingError) as e:
        logger.error(f"❌ Erro na busca semântica: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "Erro ao realizar busca semântica",
        )

    formatted = [format_search_result(r) for r in results]
    return {"query": payload.query, "results": formatted, "count": len(formatted)}


@router.get("/similar/{property_id}")
async def similar_properties(
    property_id: str,
    limit: int = 5,
    threshold: float = 0.7,
    db: AsyncSession = Depends(get_db),
):
    """Imóveis parecidos com o informado."""
    try:
        results = await find_similar_properties(db, property_id, limit=limit, threshold=threshold)
    except SemanticSearchError as e:
        logger.error(f"❌ Erro ao buscar similares de {property_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e) or "Erro ao buscar imóveis similares",
        )

    formatted = [format_search_result(r) for r in results]
    return {"propertyId": property_id, "similarProperties": formatted, "count": len(formatted)}


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Busca imóvel por ID."""
    result = await db.execute(
        select(Property).where(Property.id == property_id, Property.not_deleted())
    )
    prop = result.scalar_one_or_none()

    if not prop:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Imóvel não encontrado")

    return prop

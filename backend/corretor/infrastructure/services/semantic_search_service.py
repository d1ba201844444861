"""
SERVIÇO DE BUSCA SEMÂNTICA - pgvector
======================================

Busca imóveis por similaridade de embeddings.

Fluxo:
1. Corretor pergunta: "Apartamento perto do parque com varanda"
2. Gera embedding da query (text-embedding-3-small)
3. Compara com properties.ai_embedding via pgvector (distância coseno)
4. Retorna os imóveis acima do threshold, do mais ao menos parecido

Busca híbrida:
- Filtros relacionais (cidade, preço, quartos...) no SQL
- Similaridade coseno calculada em Python sobre o resultado filtrado
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from sqlalchemy import Select, or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.domain.entities import Property, PropertyStatus
from corretor.infrastructure.services.embedding_service import generate_query_embedding

logger = logging.getLogger(__name__)


class SemanticSearchError(Exception):
    """Falha na consulta vetorial ou relacional."""


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Similaridade coseno entre dois vetores.

    Vetores de tamanhos diferentes levantam ValueError.
    Vetor nulo retorna 0.0.
    """
    if len(vec_a) != len(vec_b):
        raise ValueError("Vectors must have the same length")

    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


@dataclass
class SemanticSearchResult:
    id: str
    title: str
    description: Optional[str] = None
    property_type: Optional[str] = None
    listing_type: Optional[str] = None
    price_monthly: Optional[float] = None
    price_total: Optional[float] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = None
    address_neighborhood: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area_total: Optional[float] = None
    features: List[str] = field(default_factory=list)
    ai_summary: Optional[str] = None
    similarity: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class HybridSearchOptions:
    """Filtros tradicionais combinados com a busca semântica."""

    limit: int = 10
    threshold: float = 0.7
    city: Optional[str] = None
    state: Optional[str] = None
    neighborhood: Optional[str] = None
    property_type: Optional[str] = None
    listing_type: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_bedrooms: Optional[int] = None
    max_bedrooms: Optional[int] = None
    min_bathrooms: Optional[int] = None
    min_area: Optional[float] = None
    max_area: Optional[float] = None

    @classmethod
    def from_filters(
        cls,
        filters: Dict[str, Any],
        limit: int = 10,
        threshold: float = 0.7,
    ) -> "HybridSearchOptions":
        """Converte os filtros recebidos pela API (camelCase)."""
        return cls(
            limit=limit,
            threshold=threshold,
            city=filters.get("city"),
            state=filters.get("state"),
            neighborhood=filters.get("neighborhood"),
            property_type=filters.get("propertyType"),
            listing_type=filters.get("listingType"),
            min_price=filters.get("minPrice"),
            max_price=filters.get("maxPrice"),
            min_bedrooms=filters.get("minBedrooms"),
            max_bedrooms=filters.get("maxBedrooms"),
            min_bathrooms=filters.get("minBathrooms"),
            min_area=filters.get("minArea"),
            max_area=filters.get("maxArea"),
        )


# Colunas devolvidas pelas buscas vetoriais
_RESULT_COLUMNS = """
    p.id, p.title, p.description, p.property_type, p.listing_type,
    p.price_monthly, p.price_total, p.address_city, p.address_state,
    p.address_neighborhood, p.bedrooms, p.bathrooms, p.area_total,
    p.features, p.ai_summary
"""

_ACTIVE_WITH_EMBEDDING = """
    p.deleted_at IS NULL
    AND p.status = 'active'
    AND p.ai_embedding IS NOT NULL
"""


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value) if isinstance(value, Decimal) else value


def _row_to_result(row: Any, similarity: float) -> SemanticSearchResult:
    return SemanticSearchResult(
        id=str(row.id),
        title=row.title,
        description=row.description,
        property_type=row.property_type,
        listing_type=row.listing_type,
        price_monthly=_to_float(row.price_monthly),
        price_total=_to_float(row.price_total),
        address_city=row.address_city,
        address_state=row.address_state,
        address_neighborhood=row.address_neighborhood,
        bedrooms=row.bedrooms,
        bathrooms=row.bathrooms,
        area_total=_to_float(row.area_total),
        features=list(row.features or []),
        ai_summary=row.ai_summary,
        similarity=float(similarity),
    )


def _vector_literal(embedding: Sequence[float]) -> str:
    """Formato textual aceito pelo pgvector: '[0.1,0.2,...]'."""
    return "[" + ",".join(str(float(v)) for v in embedding) + "]"


# =============================================================================
# BUSCAS VETORIAIS (pgvector)
# =============================================================================

async def semantic_search_properties(
    db: AsyncSession,
    query: str,
    limit: int = 10,
    threshold: float = 0.7,
) -> List[SemanticSearchResult]:
    """
    Busca imóveis por uma consulta em linguagem natural.

    Similaridade coseno: 1 - (a <=> b), onde <=> é a distância coseno do pgvector.
    """
    query_embedding = await generate_query_embedding(query)

    sql = text(f"""
        SELECT {_RESULT_COLUMNS},
            1 - (p.ai_embedding::vector <=> CAST(:query_embedding AS vector)) AS similarity
        FROM properties p
        WHERE {_ACTIVE_WITH_EMBEDDING}
            AND 1 - (p.ai_embedding::vector <=> CAST(:query_embedding AS vector)) >= :threshold
        ORDER BY similarity DESC
        LIMIT :limit
    """)

    try:
        result = await db.execute(
            sql,
            {
                "query_embedding": _vector_literal(query_embedding),
                "threshold": threshold,
                "limit": limit,
            },
        )
    except SQLAlchemyError as e:
        logger.error(f"❌ Erro na busca semântica: {e}")
        raise SemanticSearchError(f"Semantic search failed: {e}") from e

    results = [_row_to_result(row, row.similarity) for row in result]
    logger.info(f"🔍 Busca semântica: {len(results)} resultados para '{query[:50]}'")
    return results


async def find_similar_properties(
    db: AsyncSession,
    property_id: Any,
    limit: int = 5,
    threshold: float = 0.7,
) -> List[SemanticSearchResult]:
    """Imóveis parecidos com um imóvel de referência (que fica fora do resultado)."""
    sql = text(f"""
        SELECT {_RESULT_COLUMNS},
            1 - (p.ai_embedding::vector <=> target.ai_embedding::vector) AS similarity
        FROM properties p
        CROSS JOIN (
            SELECT ai_embedding FROM properties
            WHERE id = CAST(:property_id AS uuid) AND ai_embedding IS NOT NULL
        ) AS target
        WHERE {_ACTIVE_WITH_EMBEDDING}
            AND p.id != CAST(:property_id AS uuid)
            AND 1 - (p.ai_embedding::vector <=> target.ai_embedding::vector) >= :threshold
        ORDER BY similarity DESC
        LIMIT :limit
    """)

    try:
        result = await db.execute(
            sql,
            {"property_id": str(property_id), "threshold": threshold, "limit": limit},
        )
    except SQLAlchemyError as e:
        logger.error(f"❌ Erro buscando imóveis similares a {property_id}: {e}")
        raise SemanticSearchError(f"Failed to find similar properties: {e}") from e

    return [_row_to_result(row, row.similarity) for row in result]


async def match_properties_for_client(
    db: AsyncSession,
    client_id: Any,
    limit: int = 10,
    threshold: float = 0.6,
) -> List[SemanticSearchResult]:
    """Imóveis que combinam com o embedding de preferências do cliente."""
    sql = text(f"""
        SELECT {_RESULT_COLUMNS},
            1 - (p.ai_embedding::vector <=> c.preferences_embedding::vector) AS similarity
        FROM properties p
        CROSS JOIN (
            SELECT preferences_embedding FROM clients
            WHERE id = CAST(:client_id AS uuid)
                AND deleted_at IS NULL
                AND preferences_embedding IS NOT NULL
        ) AS c
        WHERE {_ACTIVE_WITH_EMBEDDING}
            AND 1 - (p.ai_embedding::vector <=> c.preferences_embedding::vector) >= :threshold
        ORDER BY similarity DESC
        LIMIT :limit
    """)

    try:
        result = await db.execute(
            sql,
            {"client_id": str(client_id), "threshold": threshold, "limit": limit},
        )
    except SQLAlchemyError as e:
        logger.error(f"❌ Erro no match de imóveis para cliente {client_id}: {e}")
        raise SemanticSearchError(f"Failed to match properties for client: {e}") from e

    return [_row_to_result(row, row.similarity) for row in result]


# =============================================================================
# BUSCA HÍBRIDA
# =============================================================================

def build_hybrid_query(options: HybridSearchOptions) -> Select:
    """Query relacional da busca híbrida (somente imóveis ativos e com embedding)."""
    query = select(Property).where(
        Property.not_deleted(),
        Property.status == PropertyStatus.ACTIVE.value,
        Property.ai_embedding.is_not(None),
    )

    if options.city:
        query = query.where(Property.address_city.ilike(f"%{options.city}%"))
    if options.state:
        query = query.where(Property.address_state == options.state)
    if options.neighborhood:
        query = query.where(Property.address_neighborhood.ilike(f"%{options.neighborhood}%"))
    if options.property_type:
        query = query.where(Property.property_type == options.property_type)
    if options.listing_type:
        query = query.where(Property.listing_type == options.listing_type)

    # Preço vale tanto para aluguel quanto para venda
    if options.min_price:
        query = query.where(
            or_(Property.price_monthly >= options.min_price, Property.price_total >= options.min_price)
        )
    if options.max_price:
        query = query.where(
            or_(Property.price_monthly <= options.max_price, Property.price_total <= options.max_price)
        )

    if options.min_bedrooms:
        query = query.where(Property.bedrooms >= options.min_bedrooms)
    if options.max_bedrooms:
        query = query.where(Property.bedrooms <= options.max_bedrooms)
    if options.min_bathrooms:
        query = query.where(Property.bathrooms >= options.min_bathrooms)

    if options.min_area:
        query = query.where(Property.area_total >= options.min_area)
    if options.max_area:
        query = query.where(Property.area_total <= options.max_area)

    return query


def _parse_embedding(raw: Any) -> List[float]:
    if isinstance(raw, str):
        return json.loads(raw)
    return list(raw)


async def hybrid_search(
    db: AsyncSession,
    query: str,
    options: Optional[HybridSearchOptions] = None,
) -> List[SemanticSearchResult]:
    """Filtra no banco e ordena pela similaridade com a consulta."""
    options = options or HybridSearchOptions()
    query_embedding = await generate_query_embedding(query)

    try:
        result = await db.execute(build_hybrid_query(options))
        properties = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"❌ Erro na busca híbrida: {e}")
        raise SemanticSearchError(f"Hybrid search failed: {e}") from e

    if not properties:
        return []

    results: List[SemanticSearchResult] = []
    for prop in properties:
        try:
            similarity = cosine_similarity(query_embedding, _parse_embedding(prop.ai_embedding))
        except (ValueError, TypeError) as e:
            logger.warning(f"⚠️ Embedding inválido no imóvel {prop.id}: {e}")
            continue

        if similarity >= options.threshold:
            results.append(_row_to_result(prop, similarity))

    results.sort(key=lambda r: r.similarity, reverse=True)
    return results[: options.limit]

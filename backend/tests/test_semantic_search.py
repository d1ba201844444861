"""
TESTES - BUSCA SEMÂNTICA
========================
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from corretor.infrastructure.services.semantic_search_service import (
    HybridSearchOptions,
    SemanticSearchError,
    build_hybrid_query,
    cosine_similarity,
    find_similar_properties,
    hybrid_search,
    semantic_search_properties,
)
from tests.conftest import make_result

SERVICE = "corretor.infrastructure.services.semantic_search_service"


def _compile(query) -> str:
    return str(query.compile(dialect=postgresql.dialect()))


def _row(**overrides):
    data = {
        "id": "11111111-1111-1111-1111-111111111111",
        "title": "Casa com quintal",
        "description": None,
        "property_type": "casa",
        "listing_type": "sale",
        "price_monthly": None,
        "price_total": 650000,
        "address_city": "Jundiaí",
        "address_state": "SP",
        "address_neighborhood": "Eloy Chaves",
        "bedrooms": 3,
        "bathrooms": 2,
        "area_total": 180,
        "features": ["quintal"],
        "ai_summary": None,
        "similarity": 0.91,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


# =============================================================================
# COSSENO
# =============================================================================

def test_cosine_identical_vectors():
    assert cosine_similarity([1, 2, 3], [1, 2, 3]) == pytest.approx(1.0)


def test_cosine_orthogonal_and_opposite():
    assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
    assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)


def test_cosine_zero_vector_returns_zero():
    assert cosine_similarity([0, 0], [1, 1]) == 0.0


def test_cosine_length_mismatch_raises():
    with pytest.raises(ValueError):
        cosine_similarity([1, 2], [1, 2, 3])


# =============================================================================
# QUERY HÍBRIDA
# =============================================================================

def test_from_filters_maps_camel_case():
    options = HybridSearchOptions.from_filters(
        {"city": "Jundiaí", "propertyType": "casa", "minPrice": 100000, "minBedrooms": 2},
        limit=5,
        threshold=0.5,
    )

    assert options.limit == 5
    assert options.threshold == 0.5
    assert options.city == "Jundiaí"
    assert options.property_type == "casa"
    assert options.min_price == 100000
    assert options.min_bedrooms == 2
    assert options.max_price is None


def test_hybrid_query_base_filters():
    sql = _compile(build_hybrid_query(HybridSearchOptions()))

    assert "properties.deleted_at IS NULL" in sql
    assert "properties.status" in sql
    assert "properties.ai_embedding IS NOT NULL" in sql
    assert "ILIKE" not in sql


def test_hybrid_query_with_filters():
    options = HybridSearchOptions(city="Jundiaí", neighborhood="Centro", min_price=1000, min_area=50)

    sql = _compile(build_hybrid_query(options))

    assert "properties.address_city ILIKE" in sql
    assert "properties.address_neighborhood ILIKE" in sql
    assert "properties.price_monthly >=" in sql
    assert "properties.price_total >=" in sql
    assert " OR " in sql
    assert "properties.area_total >=" in sql


# =============================================================================
# BUSCAS
# =============================================================================

@pytest.mark.asyncio
async def test_hybrid_search_ranks_by_similarity(db_session, make_property):
    near = make_property(title="Perto", ai_embedding=[1.0, 0.0])
    far = make_property(title="Longe", ai_embedding=[0.0, 1.0])
    mid = make_property(title="Meio", ai_embedding=[1.0, 1.0])
    db_session.execute.return_value = make_result(scalars=[far, mid, near])

    with patch(f"{SERVICE}.generate_query_embedding", AsyncMock(return_value=[1.0, 0.0])):
        results = await hybrid_search(db_session, "perto", HybridSearchOptions(threshold=0.5))

    assert [r.title for r in results] == ["Perto", "Meio"]
    assert results[0].similarity == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_hybrid_search_skips_invalid_embeddings(db_session, make_property):
    broken = make_property(title="Quebrado", ai_embedding=[1.0, 0.0, 0.0])
    ok = make_property(title="Ok", ai_embedding="[1.0, 0.0]")
    db_session.execute.return_value = make_result(scalars=[broken, ok])

    with patch(f"{SERVICE}.generate_query_embedding", AsyncMock(return_value=[1.0, 0.0])):
        results = await hybrid_search(db_session, "ok", HybridSearchOptions(threshold=0.1))

    assert [r.title for r in results] == ["Ok"]


@pytest.mark.asyncio
async def test_semantic_search_passes_vector_literal(db_session):
    db_session.execute.return_value = make_result(rows=[_row()])

    with patch(f"{SERVICE}.generate_query_embedding", AsyncMock(return_value=[0.5, 0.25])):
        results = await semantic_search_properties(db_session, "casa com quintal", limit=3, threshold=0.8)

    params = db_session.execute.call_args.args[1]
    assert params == {"query_embedding": "[0.5,0.25]", "threshold": 0.8, "limit": 3}
    assert len(results) == 1
    assert results[0].price_total == 650000
    assert results[0].similarity == pytest.approx(0.91)


@pytest.mark.asyncio
async def test_semantic_search_wraps_database_errors(db_session):
    db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

    with patch(f"{SERVICE}.generate_query_embedding", AsyncMock(return_value=[0.5])):
        with pytest.raises(SemanticSearchError):
            await semantic_search_properties(db_session, "casa")


@pytest.mark.asyncio
async def test_find_similar_excludes_reference(db_session):
    db_session.execute.return_value = make_result(rows=[_row(similarity=0.8)])

    results = await find_similar_properties(db_session, "abc", limit=2)

    sql = str(db_session.execute.call_args.args[0])
    assert "p.id != CAST(:property_id AS uuid)" in sql
    assert db_session.execute.call_args.args[1]["property_id"] == "abc"
    assert results[0].similarity == pytest.approx(0.8)

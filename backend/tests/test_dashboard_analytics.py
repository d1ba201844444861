"""
TESTES - ANALYTICS DO DASHBOARD
===============================
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from corretor.infrastructure.services.dashboard_analytics_service import (
    EMPTY_STATS,
    compute_dashboard_stats,
    compute_data_quality,
    compute_feature_analysis,
    compute_market_insights,
    compute_neighborhood_stats,
    compute_price_distribution,
    compute_property_distribution,
    get_dashboard_stats,
    get_property_samples,
)
from tests.conftest import make_result

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _row(**overrides):
    data = {
        "id": "p1",
        "title": "Imóvel",
        "listing_type": "sale",
        "property_type": "apartamento",
        "price_total": None,
        "price_monthly": None,
        "area_total": None,
        "features": [],
        "address_neighborhood": None,
        "address_city": "Jundiaí",
        "latitude": None,
        "longitude": None,
        "ai_embedding": False,
        "image_url": None,
        "bedrooms": None,
        "created_at": NOW - timedelta(days=60),
    }
    data.update(overrides)
    return SimpleNamespace(**data)


# =============================================================================
# ESTATÍSTICAS GERAIS
# =============================================================================

def test_dashboard_stats():
    properties = [
        _row(listing_type="rent", price_monthly=2000, created_at=NOW - timedelta(days=2)),
        _row(listing_type="sale", price_total=500000, created_at=NOW - timedelta(days=20)),
    ]
    clients = [
        SimpleNamespace(created_at=NOW - timedelta(days=10)),
        SimpleNamespace(created_at=NOW - timedelta(days=40)),
    ]

    stats = compute_dashboard_stats(properties, clients, upcoming_viewings=4, now=NOW)

    assert stats == {
        "totalProperties": 2,
        "propertiesThisWeek": 1,
        "totalClients": 2,
        "clientsThisMonth": 1,
        "upcomingViewings": 4,
        "avgPrice": 262000,
        "rentProperties": 1,
        "saleProperties": 1,
        "avgRentPrice": 2000,
        "avgSalePrice": 500000,
    }


def test_dashboard_stats_empty():
    stats = compute_dashboard_stats([], [], 0, now=NOW)

    assert stats == EMPTY_STATS


@pytest.mark.asyncio
async def test_get_dashboard_stats_returns_defaults_on_error(db_session):
    db_session.execute.side_effect = RuntimeError("db fora")

    assert await get_dashboard_stats(db_session) == EMPTY_STATS


# =============================================================================
# DISTRIBUIÇÕES
# =============================================================================

def test_property_distribution():
    rows = [_row(), _row(), _row(property_type="casa"), _row(property_type=None)]

    distribution = compute_property_distribution(rows)

    assert distribution[0] == {"type": "apartamento", "count": 2, "percentage": 50.0}
    assert {d["type"] for d in distribution} == {"apartamento", "casa", "unknown"}
    assert compute_property_distribution([]) == []


def test_price_distribution_ranges():
    rows = [
        _row(listing_type="rent", price_monthly=2000),
        _row(listing_type="sale", price_total=500000),
        _row(listing_type="sale", price_total=700000),
    ]

    ranges = compute_price_distribution(rows)

    assert len(ranges) == 5
    assert ranges[0]["label"] == "Até R$ 200k"
    assert ranges[0]["rentCount"] == 1
    assert ranges[0]["avgRentPrice"] == 2000
    assert ranges[2]["count"] == 2
    assert ranges[2]["avgSalePrice"] == 600000
    assert ranges[4]["count"] == 0


# =============================================================================
# CARACTERÍSTICAS E BAIRROS
# =============================================================================

def test_feature_analysis_premium():
    rows = (
        [_row(price_total=600000, features=["piscina"]) for _ in range(10)]
        + [_row(price_total=400000, features=[]) for _ in range(10)]
        + [_row(price_total=400000, features=["varanda"]) for _ in range(3)]
    )

    analysis = compute_feature_analysis(rows)

    assert [f["feature"] for f in analysis] == ["piscina"]
    piscina = analysis[0]
    assert piscina["count"] == 10
    assert piscina["avgPriceWith"] == 600000
    assert piscina["avgPriceWithout"] == 400000
    assert piscina["pricePremium"] == 200000
    assert piscina["premiumPercentage"] == 50.0
    assert piscina["rentData"] == {"count": 0, "avgPriceWith": 0, "premiumPercentage": 0.0}
    assert piscina["saleData"]["premiumPercentage"] == 50.0


def test_feature_present_everywhere_has_no_premium():
    rows = [_row(price_total=100000, features=["portaria"]) for _ in range(10)]

    analysis = compute_feature_analysis(rows)

    assert analysis[0]["avgPriceWithout"] == 0
    assert analysis[0]["premiumPercentage"] == 0.0


def test_neighborhood_stats():
    rows = [
        _row(address_neighborhood="Centro", price_total=100, area_total=10),
        _row(address_neighborhood="Centro", price_total=200, area_total=10),
        _row(address_neighborhood="Centro", price_total=300, area_total=10, property_type="casa"),
        _row(address_neighborhood="Vila Arens", price_total=100),
        _row(address_neighborhood="Vila Arens", price_total=100),
    ]

    stats = compute_neighborhood_stats(rows)

    assert len(stats) == 1
    centro = stats[0]
    assert centro["neighborhood"] == "Centro"
    assert centro["count"] == 3
    assert centro["avgPrice"] == 200
    assert centro["minPrice"] == 100
    assert centro["maxPrice"] == 300
    assert centro["pricePerSqm"] == 20
    assert centro["propertyTypes"] == {"apartamento": 2, "casa": 1}


# =============================================================================
# INSIGHTS E QUALIDADE
# =============================================================================

def test_market_insights():
    rows = [
        _row(listing_type="rent", price_monthly=2000),
        _row(listing_type="sale", price_total=300000, property_type="casa"),
        _row(listing_type="sale", price_total=350000),
        _row(listing_type="sale", price_total=3000000),
    ]

    insights = compute_market_insights(rows)

    assert insights["portfolioMix"] == {"rentPercentage": 25, "salePercentage": 75}
    assert insights["dominantType"] == {"type": "apartamento", "percentage": 75}
    assert insights["dominantPriceRange"] == {"range": "R$ 200k - R$ 500k", "percentage": 50}
    assert insights["topFeature"] == {"feature": "N/A", "premiumPercentage": 0}
    assert compute_market_insights([]) is None


def test_data_quality():
    rows = [
        _row(address_neighborhood="Centro", latitude=-23.18, longitude=-46.88, features=["piscina"], ai_embedding=True),
        _row(),
    ]

    quality = compute_data_quality(rows)

    assert quality == {
        "totalProperties": 2,
        "withNeighborhood": 1,
        "withoutNeighborhood": 1,
        "withCoordinates": 1,
        "withFeatures": 1,
        "withEmbeddings": 1,
        "completenessScore": 50,
    }
    assert compute_data_quality([]) is None


@pytest.mark.asyncio
async def test_property_samples(db_session):
    rows = [_row(id=f"p{i}", price_monthly=1500 + i, area_total=50) for i in range(6)]
    db_session.execute.return_value = make_result(rows=rows)

    samples = await get_property_samples(db_session, limit=3)

    assert len(samples) == 3
    assert len({s["id"] for s in samples}) == 3
    assert samples[0]["area"] == 50.0
    assert samples[0]["city"] == "Jundiaí"

"""
ANALYTICS DO DASHBOARD
======================

Métricas do painel do corretor calculadas sobre os imóveis ativos:
- Estatísticas gerais (imóveis, clientes, visitas, preços médios)
- Atividades recentes
- Distribuição por tipo e por faixa de preço
- Análise de características (prêmio de preço)
- Estatísticas por bairro
- Insights de mercado e qualidade dos dados

As funções compute_* são puras (recebem linhas já carregadas).
As funções get_* carregam do banco e, em caso de erro, registram no log
e devolvem o valor vazio padrão.
"""

import logging
import math
import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.domain.entities import (
    Client,
    Property,
    PropertyStatus,
    Viewing,
    ViewingStatus,
)

logger = logging.getLogger(__name__)

PRICE_RANGES = [
    {"min": 0, "max": 200000, "label": "Até R$ 200k"},
    {"min": 200000, "max": 500000, "label": "R$ 200k - R$ 500k"},
    {"min": 500000, "max": 1000000, "label": "R$ 500k - R$ 1M"},
    {"min": 1000000, "max": 2000000, "label": "R$ 1M - R$ 2M"},
    {"min": 2000000, "max": 999999999, "label": "Acima de R$ 2M"},
]

MIN_FEATURE_COUNT = 10
MIN_NEIGHBORHOOD_COUNT = 3
TOP_N = 15

EMPTY_STATS = {
    "totalProperties": 0,
    "propertiesThisWeek": 0,
    "totalClients": 0,
    "clientsThisMonth": 0,
    "upcomingViewings": 0,
    "avgPrice": 0,
    "rentProperties": 0,
    "saleProperties": 0,
    "avgRentPrice": 0,
    "avgSalePrice": 0,
}


def _round(value: float) -> int:
    """Arredondamento half-up para inteiro."""
    return math.floor(value + 0.5)


def _round1(value: float) -> float:
    """Uma casa decimal, half-up."""
    return math.floor(value * 10 + 0.5) / 10


def _num(value: Any) -> float:
    return float(value) if value else 0.0


def _price(row: Any) -> float:
    """Preço de referência: venda, senão aluguel."""
    return _num(row.price_total) or _num(row.price_monthly)


def _active_properties(*columns):
    return select(*columns).where(
        Property.status == PropertyStatus.ACTIVE.value,
        Property.not_deleted(),
    )


# =============================================================================
# CÁLCULOS
# =============================================================================

def compute_dashboard_stats(
    properties: Sequence[Any],
    clients: Sequence[Any],
    upcoming_viewings: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)

    total = len(properties)
    rent = [p for p in properties if p.listing_type == "rent"]
    sale = [p for p in properties if p.listing_type == "sale"]

    # Aluguel anualizado quando não há preço de venda
    avg_price = sum(
        _num(p.price_total) or _num(p.price_monthly) * 12 for p in properties
    ) / (total or 1)
    avg_rent = sum(_num(p.price_monthly) for p in rent) / (len(rent) or 1)
    avg_sale = sum(_num(p.price_total) for p in sale) / (len(sale) or 1)

    return {
        "totalProperties": total,
        "propertiesThisWeek": sum(1 for p in properties if p.created_at and p.created_at >= week_ago),
        "totalClients": len(clients),
        "clientsThisMonth": sum(1 for c in clients if c.created_at and c.created_at >= month_ago),
        "upcomingViewings": upcoming_viewings,
        "avgPrice": _round(avg_price),
        "rentProperties": len(rent),
        "saleProperties": len(sale),
        "avgRentPrice": _round(avg_rent),
        "avgSalePrice": _round(avg_sale),
    }


def compute_property_distribution(properties: Sequence[Any]) -> List[Dict[str, Any]]:
    if not properties:
        return []

    total = len(properties)
    counts: Dict[str, int] = {}
    for p in properties:
        key = p.property_type or "unknown"
        counts[key] = counts.get(key, 0) + 1

    distribution = [
        {"type": t, "count": c, "percentage": _round1(c / total * 100)}
        for t, c in counts.items()
    ]
    return sorted(distribution, key=lambda d: d["count"], reverse=True)


def compute_price_distribution(properties: Sequence[Any]) -> List[Dict[str, Any]]:
    if not properties:
        return []

    ranges = []
    for price_range in PRICE_RANGES:
        in_range = [p for p in properties if price_range["min"] <= _price(p) < price_range["max"]]
        rent = [p for p in in_range if p.listing_type == "rent"]
        sale = [p for p in in_range if p.listing_type == "sale"]

        avg_rent = sum(_num(p.price_monthly) for p in rent) / len(rent) if rent else 0
        avg_sale = sum(_num(p.price_total) for p in sale) / len(sale) if sale else 0

        ranges.append({
            **price_range,
            "count": len(in_range),
            "rentCount": len(rent),
            "saleCount": len(sale),
            "avgRentPrice": _round(avg_rent),
            "avgSalePrice": _round(avg_sale),
        })

    return ranges


def _premium(avg_with: float, avg_without: float) -> float:
    return (avg_with - avg_without) / avg_without * 100 if avg_without > 0 else 0.0


def compute_feature_analysis(properties: Sequence[Any]) -> List[Dict[str, Any]]:
    """
    Prêmio de preço de cada característica: média com vs. média sem.

    Só entram características presentes em 10+ imóveis; top 15 por prêmio.
    """
    if not properties:
        return []

    total = len(properties)
    rent_total_count = sum(1 for p in properties if p.listing_type == "rent")
    sale_total_count = sum(1 for p in properties if p.listing_type == "sale")

    total_price_all = 0.0
    total_rent_price = 0.0
    total_sale_price = 0.0
    stats: Dict[str, Dict[str, float]] = {}

    for p in properties:
        price = _price(p)
        total_price_all += price

        if p.listing_type == "rent":
            total_rent_price += _num(p.price_monthly)
        elif p.listing_type == "sale":
            total_sale_price += _num(p.price_total)

        if not isinstance(p.features, list):
            continue

        for feature in p.features:
            s = stats.setdefault(feature, {
                "count": 0, "total_price_with": 0.0,
                "rent_count": 0, "rent_price_with": 0.0,
                "sale_count": 0, "sale_price_with": 0.0,
            })
            s["count"] += 1
            s["total_price_with"] += price

            if p.listing_type == "rent":
                s["rent_count"] += 1
                s["rent_price_with"] += _num(p.price_monthly)
            elif p.listing_type == "sale":
                s["sale_count"] += 1
                s["sale_price_with"] += _num(p.price_total)

    analysis = []
    for feature, s in stats.items():
        if s["count"] < MIN_FEATURE_COUNT:
            continue

        avg_with = s["total_price_with"] / s["count"]
        without_count = total - s["count"]
        avg_without = (total_price_all - s["total_price_with"]) / without_count if without_count else 0.0
        price_premium = avg_with - avg_without

        rent_avg_with = s["rent_price_with"] / s["rent_count"] if s["rent_count"] else 0.0
        rent_avg_without = (
            (total_rent_price - s["rent_price_with"]) / (rent_total_count - s["rent_count"])
            if rent_total_count > s["rent_count"] else 0.0
        )
        sale_avg_with = s["sale_price_with"] / s["sale_count"] if s["sale_count"] else 0.0
        sale_avg_without = (
            (total_sale_price - s["sale_price_with"]) / (sale_total_count - s["sale_count"])
            if sale_total_count > s["sale_count"] else 0.0
        )

        analysis.append({
            "feature": feature,
            "count": int(s["count"]),
            "percentage": _round1(s["count"] / total * 100),
            "avgPriceWith": _round(avg_with),
            "avgPriceWithout": _round(avg_without),
            "pricePremium": _round(price_premium),
            "premiumPercentage": _round1(_premium(avg_with, avg_without)),
            "rentData": {
                "count": int(s["rent_count"]),
                "avgPriceWith": _round(rent_avg_with),
                "premiumPercentage": _round1(_premium(rent_avg_with, rent_avg_without)),
            },
            "saleData": {
                "count": int(s["sale_count"]),
                "avgPriceWith": _round(sale_avg_with),
                "premiumPercentage": _round1(_premium(sale_avg_with, sale_avg_without)),
            },
        })

    analysis.sort(key=lambda f: f["premiumPercentage"], reverse=True)
    return analysis[:TOP_N]


def compute_neighborhood_stats(properties: Sequence[Any]) -> List[Dict[str, Any]]:
    """Bairros com 3+ imóveis com preço, ordenados por quantidade (top 15)."""
    data: Dict[str, Dict[str, Any]] = {}

    for p in properties:
        hood = p.address_neighborhood
        if not hood:
            continue

        d = data.setdefault(hood, {
            "prices": [], "areas": [], "property_types": {},
            "rent_prices": [], "sale_prices": [],
        })

        price = _price(p)
        if price > 0:
            d["prices"].append(price)
            if p.listing_type == "rent":
                d["rent_prices"].append(_num(p.price_monthly))
            elif p.listing_type == "sale":
                d["sale_prices"].append(_num(p.price_total))

        if _num(p.area_total) > 0:
            d["areas"].append(_num(p.area_total))

        key = p.property_type or "unknown"
        d["property_types"][key] = d["property_types"].get(key, 0) + 1

    stats = []
    for hood, d in data.items():
        prices = d["prices"]
        if len(prices) < MIN_NEIGHBORHOOD_COUNT:
            continue

        avg_price = sum(prices) / len(prices)
        avg_area = sum(d["areas"]) / len(d["areas"]) if d["areas"] else 0
        avg_rent = sum(d["rent_prices"]) / len(d["rent_prices"]) if d["rent_prices"] else 0
        avg_sale = sum(d["sale_prices"]) / len(d["sale_prices"]) if d["sale_prices"] else 0

        stats.append({
            "neighborhood": hood,
            "count": len(prices),
            "avgPrice": _round(avg_price),
            "minPrice": min(prices),
            "maxPrice": max(prices),
            "pricePerSqm": _round(avg_price / avg_area) if avg_area > 0 else 0,
            "propertyTypes": d["property_types"],
            "rentCount": len(d["rent_prices"]),
            "saleCount": len(d["sale_prices"]),
            "avgRentPrice": _round(avg_rent),
            "avgSalePrice": _round(avg_sale),
        })

    stats.sort(key=lambda n: n["count"], reverse=True)
    return stats[:TOP_N]


def compute_market_insights(properties: Sequence[Any]) -> Optional[Dict[str, Any]]:
    if not properties:
        return None

    total = len(properties)
    rent_count = sum(1 for p in properties if p.listing_type == "rent")
    sale_count = sum(1 for p in properties if p.listing_type == "sale")

    type_count: Dict[str, int] = {}
    for p in properties:
        key = p.property_type or "unknown"
        type_count[key] = type_count.get(key, 0) + 1
    dominant_type, dominant_type_count = max(type_count.items(), key=lambda item: item[1])

    price_ranges = compute_price_distribution(properties)
    dominant_range = max(price_ranges, key=lambda r: r["count"]) if price_ranges else None

    features = compute_feature_analysis(properties)
    top_feature = features[0] if features else None

    return {
        "portfolioMix": {
            "rentPercentage": _round(rent_count / total * 100),
            "salePercentage": _round(sale_count / total * 100),
        },
        "dominantType": {
            "type": dominant_type,
            "percentage": _round(dominant_type_count / total * 100),
        },
        "dominantPriceRange": {
            "range": dominant_range["label"] if dominant_range else "N/A",
            "percentage": _round((dominant_range["count"] if dominant_range else 0) / total * 100),
        },
        "topFeature": {
            "feature": top_feature["feature"] if top_feature else "N/A",
            "premiumPercentage": top_feature["premiumPercentage"] if top_feature else 0,
        },
    }


def compute_data_quality(properties: Sequence[Any]) -> Optional[Dict[str, Any]]:
    """Cobertura de bairro, coordenadas, features e embeddings (score 0-100)."""
    if not properties:
        return None

    total = len(properties)
    with_neighborhood = sum(1 for p in properties if p.address_neighborhood)
    with_coordinates = sum(1 for p in properties if p.latitude and p.longitude)
    with_features = sum(1 for p in properties if p.features)
    with_embeddings = sum(1 for p in properties if p.ai_embedding)

    weighted = (
        with_neighborhood * 0.3
        + with_coordinates * 0.2
        + with_features * 0.2
        + with_embeddings * 0.3
    )

    return {
        "totalProperties": total,
        "withNeighborhood": with_neighborhood,
        "withoutNeighborhood": total - with_neighborhood,
        "withCoordinates": with_coordinates,
        "withFeatures": with_features,
        "withEmbeddings": with_embeddings,
        "completenessScore": _round(weighted / total * 100),
    }


def format_property_sample(p: Any) -> Dict[str, Any]:
    return {
        "id": str(p.id),
        "title": p.title,
        "price": _price(p),
        "imageUrl": p.image_url,
        "propertyType": p.property_type or "unknown",
        "neighborhood": p.address_neighborhood,
        "city": p.address_city or "",
        "bedrooms": p.bedrooms,
        "area": float(p.area_total) if p.area_total is not None else None,
    }


# =============================================================================
# CARGAS DO BANCO
# =============================================================================

async def get_dashboard_stats(db: AsyncSession) -> Dict[str, Any]:
    try:
        now = datetime.now(timezone.utc)

        properties = (await db.execute(_active_properties(
            Property.id, Property.created_at, Property.price_total,
            Property.price_monthly, Property.listing_type,
        ))).all()

        clients = (await db.execute(
            select(Client.id, Client.created_at).where(Client.not_deleted())
        )).all()

        viewings = (await db.execute(
            select(Viewing.id).where(
                Viewing.status == ViewingStatus.SCHEDULED.value,
                Viewing.scheduled_at >= now,
                Viewing.scheduled_at <= now + timedelta(days=7),
            )
        )).all()

        return compute_dashboard_stats(properties, clients, len(viewings), now)
    except Exception as e:
        logger.error(f"Erro ao buscar estatísticas do dashboard: {e}")
        return dict(EMPTY_STATS)


async def get_recent_activities(db: AsyncSession, limit: int = 10) -> List[Dict[str, Any]]:
    try:
        activities: List[Dict[str, Any]] = []

        clients = (await db.execute(
            select(Client.id, Client.full_name, Client.created_at)
            .where(Client.not_deleted())
            .order_by(Client.created_at.desc())
            .limit(5)
        )).all()

        for c in clients:
            activities.append({
                "id": str(c.id),
                "type": "client",
                "title": c.full_name,
                "description": "Novo cliente cadastrado",
                "timestamp": c.created_at,
            })

        viewings = (await db.execute(
            select(Viewing.id, Viewing.created_at, Property.title)
            .outerjoin(Property, Viewing.property_id == Property.id)
            .where(Viewing.status == ViewingStatus.SCHEDULED.value)
            .order_by(Viewing.created_at.desc())
            .limit(5)
        )).all()

        for v in viewings:
            activities.append({
                "id": str(v.id),
                "type": "viewing",
                "title": "Visita agendada",
                "description": v.title or "Imóvel",
                "timestamp": v.created_at,
            })

        activities.sort(key=lambda a: a["timestamp"], reverse=True)
        return activities[:limit]
    except Exception as e:
        logger.error(f"Erro ao buscar atividades recentes: {e}")
        return []


async def get_property_distribution(db: AsyncSession) -> List[Dict[str, Any]]:
    try:
        rows = (await db.execute(_active_properties(Property.property_type))).all()
        return compute_property_distribution(rows)
    except Exception as e:
        logger.error(f"Erro ao buscar distribuição de imóveis: {e}")
        return []


async def get_price_distribution(db: AsyncSession) -> List[Dict[str, Any]]:
    try:
        rows = (await db.execute(_active_properties(
            Property.price_total, Property.price_monthly, Property.listing_type,
        ))).all()
        return compute_price_distribution(rows)
    except Exception as e:
        logger.error(f"Erro ao buscar distribuição de preços: {e}")
        return []


async def get_feature_analysis(db: AsyncSession) -> List[Dict[str, Any]]:
    try:
        rows = (await db.execute(_active_properties(
            Property.features, Property.price_total, Property.price_monthly, Property.listing_type,
        ))).all()
        return compute_feature_analysis(rows)
    except Exception as e:
        logger.error(f"Erro ao buscar análise de características: {e}")
        return []


async def get_neighborhood_stats(db: AsyncSession) -> List[Dict[str, Any]]:
    try:
        rows = (await db.execute(
            _active_properties(
                Property.address_neighborhood, Property.price_total, Property.price_monthly,
                Property.area_total, Property.property_type, Property.listing_type,
            ).where(Property.address_neighborhood.is_not(None))
        )).all()
        return compute_neighborhood_stats(rows)
    except Exception as e:
        logger.error(f"Erro ao buscar estatísticas por bairro: {e}")
        return []


async def get_market_insights(db: AsyncSession) -> Optional[Dict[str, Any]]:
    try:
        rows = (await db.execute(_active_properties(
            Property.listing_type, Property.property_type, Property.price_total,
            Property.price_monthly, Property.features,
        ))).all()
        return compute_market_insights(rows)
    except Exception as e:
        logger.error(f"Erro ao buscar insights de mercado: {e}")
        return None


async def get_data_quality_metrics(db: AsyncSession) -> Optional[Dict[str, Any]]:
    try:
        rows = (await db.execute(_active_properties(
            Property.address_neighborhood, Property.latitude, Property.longitude,
            Property.features, Property.ai_embedding.is_not(None).label("ai_embedding"),
        ))).all()
        return compute_data_quality(rows)
    except Exception as e:
        logger.error(f"Erro ao buscar qualidade dos dados: {e}")
        return None


async def get_property_samples(db: AsyncSession, limit: int = 5) -> List[Dict[str, Any]]:
    try:
        rows = (await db.execute(
            _active_properties(
                Property.id, Property.title, Property.price_total, Property.price_monthly,
                Property.image_url, Property.property_type, Property.address_neighborhood,
                Property.address_city, Property.bedrooms, Property.area_total,
            )
            .where(Property.ai_embedding.is_not(None))
            .limit(limit * 3)
        )).all()

        if not rows:
            return []

        # Amostra aleatória dentre os candidatos
        sample = random.sample(list(rows), min(limit, len(rows)))
        return [format_property_sample(p) for p in sample]
    except Exception as e:
        logger.error(f"Erro ao buscar amostras de imóveis: {e}")
        return []

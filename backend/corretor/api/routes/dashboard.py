"""
API Routes: Dashboard
======================

Métricas do painel do corretor. Cada endpoint devolve o valor vazio
padrão quando a consulta falha (o erro fica no log).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.infrastructure.database import get_db
from corretor.infrastructure.services import dashboard_analytics_service as analytics

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats(db: AsyncSession = Depends(get_db)):
    return await analytics.get_dashboard_stats(db)


@router.get("/activities")
async def recent_activities(limit: int = 10, db: AsyncSession = Depends(get_db)):
    return await analytics.get_recent_activities(db, limit=limit)


@router.get("/distribution")
async def property_distribution(db: AsyncSession = Depends(get_db)):
    return await analytics.get_property_distribution(db)


@router.get("/price-distribution")
async def price_distribution(db: AsyncSession = Depends(get_db)):
    return await analytics.get_price_distribution(db)


@router.get("/features")
async def feature_analysis(db: AsyncSession = Depends(get_db)):
    """Características com maior prêmio de preço."""
    return await analytics.get_feature_analysis(db)


@router.get("/neighborhoods")
async def neighborhood_stats(db: AsyncSession = Depends(get_db)):
    return await analytics.get_neighborhood_stats(db)


@router.get("/insights")
async def market_insights(db: AsyncSession = Depends(get_db)):
    return await analytics.get_market_insights(db)


@router.get("/data-quality")
async def data_quality(db: AsyncSession = Depends(get_db)):
    return await analytics.get_data_quality_metrics(db)


@router.get("/samples")
async def property_samples(limit: int = 5, db: AsyncSession = Depends(get_db)):
    """Amostra aleatória de imóveis com embedding."""
    return await analytics.get_property_samples(db, limit=limit)

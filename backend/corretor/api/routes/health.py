"""
HEALTH CHECK ENDPOINTS
======================
Monitora a saúde da API e das dependências.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.infrastructure.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("/detailed")
async def health_detailed(db: AsyncSession = Depends(get_db)):
    """
    Verifica banco e extensão pgvector.

    Retorna 200 se tudo OK, 503 se o banco falhou.
    """
    checks = {}
    healthy = True

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.error(f"❌ Health check: banco indisponível: {e}")
        checks["database"] = f"error: {str(e)}"
        healthy = False

    if healthy:
        try:
            result = await db.execute(text("SELECT extversion FROM pg_extension WHERE extname = 'vector'"))
            version = result.scalar()
            checks["pgvector"] = f"ok: {version}" if version else "missing"
        except Exception as e:
            checks["pgvector"] = f"error: {str(e)}"

    checks["timestamp"] = datetime.now(timezone.utc).isoformat()

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"status": "healthy" if healthy else "unhealthy", "checks": checks},
    )

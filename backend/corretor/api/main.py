"""
CORRETOR IA API - Ponto de Entrada
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from corretor.api.routes import (
    chat_router,
    clients_router,
    dashboard_router,
    health_router,
    properties_router,
)
from corretor.config import get_settings
from corretor.infrastructure.database import init_db
from corretor.infrastructure.logging_config import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


# ============================================================
# 🔁 LIFESPAN
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(logging.DEBUG if settings.debug else logging.INFO)
    logger.info(f"🚀 Iniciando Corretor IA API ({settings.environment})...")

    # Em produção o schema vem das migrations do Alembic
    if settings.is_development:
        await init_db()
        logger.info("✅ Tabelas criadas!")

    yield

    logger.info("👋 Encerrando Corretor IA API...")


# ============================================================
# FASTAPI APP
# ============================================================
app = FastAPI(
    title="Corretor IA API",
    description="Assistente imobiliário com busca semântica e enriquecimento por IA",
    version="0.1.0",
    lifespan=lifespan,
    # Swagger e ReDoc só fora de produção
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)

# ============================================================
# ⭐ CORS
# ============================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================
# ROTAS
# ============================================================
app.include_router(chat_router, prefix="/api/v1")
app.include_router(clients_router, prefix="/api/v1")
app.include_router(properties_router, prefix="/api/v1")
app.include_router(dashboard_router, prefix="/api/v1")
app.include_router(health_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {"name": "Corretor IA API", "status": "running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    uvicorn.run(
        "corretor.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )

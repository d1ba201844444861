"""
CONEXÃO COM O POSTGRESQL
========================

Engine assíncrona (asyncpg), fábrica de sessões usada pelas rotas e pelos
scripts, e criação das tabelas em desenvolvimento.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from corretor.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

engine = create_async_engine(
    settings.async_database_url,
    echo=settings.db_echo,
    pool_pre_ping=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Sessão por request.

    Commit quando a rota termina sem erro; qualquer exceção desfaz a transação.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Habilita o pgvector e cria as tabelas (só em desenvolvimento; produção usa Alembic)."""
    from corretor.domain.entities import Base

    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)

    logger.info("🗄️ Schema sincronizado com os modelos")

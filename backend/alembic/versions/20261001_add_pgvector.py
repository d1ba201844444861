"""add pgvector and HNSW indexes for property/client embeddings

Revision ID: 20261001_002
Revises: 20261001_001
Create Date: 2026-10-01 10:30:00

"""
from typing import Sequence, Union

from alembic import op
from sqlalchemy import text

revision: str = '20261001_002'
down_revision: Union[str, None] = '20261001_001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

EMBEDDING_DIMENSIONS = 1536


def index_exists(index_name: str) -> bool:
    conn = op.get_bind()
    result = conn.execute(text(
        "SELECT EXISTS (SELECT FROM pg_indexes WHERE indexname = :name)"
    ), {"name": index_name})
    return result.scalar()


def upgrade() -> None:
    # 1. Ativa extensão pgvector
    op.execute('CREATE EXTENSION IF NOT EXISTS vector')

    # 2. Índices HNSW sobre o cast float[] -> vector
    if not index_exists('idx_properties_ai_embedding_hnsw'):
        op.execute(text(f"""
            CREATE INDEX IF NOT EXISTS idx_properties_ai_embedding_hnsw
            ON properties
            USING hnsw ((ai_embedding::vector({EMBEDDING_DIMENSIONS})) vector_cosine_ops)
            WITH (m = 16, ef_construction = 64)
        """))

    if not index_exists('idx_clients_preferences_embedding_hnsw'):
        op.execute(text(f"""
            CREATE INDEX IF NOT EXISTS idx_clients_preferences_embedding_hnsw
            ON clients
            USING hnsw ((preferences_embedding::vector({EMBEDDING_DIMENSIONS})) vector_cosine_ops)
            WITH (m = 16, ef_construction = 64)
        """))


def downgrade() -> None:
    op.execute('DROP INDEX IF EXISTS idx_clients_preferences_embedding_hnsw')
    op.execute('DROP INDEX IF EXISTS idx_properties_ai_embedding_hnsw')
    op.execute('DROP EXTENSION IF EXISTS vector')

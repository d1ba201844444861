"""
API Routes: Clients (Carteira do Corretor)
===========================================

Clientes pertencem ao corretor autenticado. Registros removidos
(deleted_at preenchido) nunca aparecem.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import Select, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.api.dependencies import get_current_agent
from corretor.api.routes.properties import format_search_result
from corretor.domain.entities import Client, ClientSource, ClientStatus, User
from corretor.infrastructure.database import get_db
from corretor.infrastructure.services.semantic_search_service import (
    SemanticSearchError,
    match_properties_for_client,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["clients"])


# =============================================================================
# SCHEMAS
# =============================================================================

class ClientCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=30)
    email: Optional[str] = None
    status: Optional[str] = None
    source: Optional[str] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    preferred_neighborhoods: List[str] = Field(default_factory=list)
    preferred_property_types: List[str] = Field(default_factory=list)
    min_bedrooms: Optional[int] = None
    min_bathrooms: Optional[int] = None
    required_features: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class ClientResponse(BaseModel):
    id: uuid.UUID
    full_name: str
    phone: str
    email: Optional[str] = None
    agent_id: Optional[uuid.UUID] = None
    status: Optional[str] = None
    source: Optional[str] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    preferred_neighborhoods: Optional[List[str]] = None
    preferred_property_types: Optional[List[str]] = None
    min_bedrooms: Optional[int] = None
    min_bathrooms: Optional[int] = None
    required_features: Optional[List[str]] = None
    notes: Optional[str] = None
    converted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# HELPERS
# =============================================================================

def build_clients_query(
    agent_id: uuid.UUID,
    status_filter: Optional[str] = None,
    search: Optional[str] = None,
) -> Select:
    query = select(Client).where(
        Client.agent_id == agent_id,
        Client.not_deleted(),
    )

    if status_filter:
        query = query.where(Client.status == status_filter)

    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Client.full_name.ilike(pattern),
                Client.email.ilike(pattern),
                Client.phone.ilike(pattern),
            )
        )

    return query.order_by(Client.created_at.desc())


async def _get_agent_client(db: AsyncSession, client_id: uuid.UUID, agent: User) -> Client:
    result = await db.execute(
        select(Client).where(
            Client.id == client_id,
            Client.agent_id == agent.id,
            Client.not_deleted(),
        )
    )
    client = result.scalar_one_or_none()

    if not client:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Cliente não encontrado")

    return client


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", response_model=List[ClientResponse])
async def list_clients(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    agent: User = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Lista os clientes do corretor."""
    result = await db.execute(build_clients_query(agent.id, status_filter, search))
    return result.scalars().all()


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: ClientCreate,
    agent: User = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Cadastra cliente na carteira do corretor."""
    data = payload.model_dump()
    data["status"] = data["status"] or ClientStatus.ACTIVE.value
    data["source"] = data["source"] or ClientSource.MANUAL.value

    client = Client(id=uuid.uuid4(), agent_id=agent.id, **data)
    db.add(client)
    await db.flush()
    await db.refresh(client)

    logger.info(f"👤 Cliente criado: {client.id} (corretor {agent.id})")
    return client


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: uuid.UUID,
    agent: User = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    return await _get_agent_client(db, client_id, agent)


@router.get("/{client_id}/matches")
async def get_client_matches(
    client_id: uuid.UUID,
    limit: int = 10,
    threshold: float = 0.6,
    agent: User = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """Imóveis semanticamente compatíveis com as preferências do cliente."""
    client = await _get_agent_client(db, client_id, agent)

    try:
        results = await match_properties_for_client(db, client.id, limit=limit, threshold=threshold)
    except SemanticSearchError as e:
        logger.error(f"❌ Erro no match do cliente {client_id}: {e}")
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    matches = [format_search_result(r) for r in results]
    return {"clientId": str(client.id), "matches": matches, "count": len(matches)}

"""
AI TOOLS - Ferramentas do assistente do corretor (Function Calling)
===================================================================

Define as ferramentas (tools) que a IA pode chamar durante uma conversa.
Cada tool tem:
1. Definição (schema OpenAI)
2. Executor (função que executa a ação no banco)

Tools disponíveis:
- searchProperties: Busca imóveis por filtros
- getPropertyDetails: Detalhes completos de um imóvel
- captureLead: Cadastra um novo cliente
- scheduleViewing: Agenda visita a um imóvel
- getMarketInsights: Estatísticas de mercado por região
- getClientInfo: Dados e preferências de um cliente
- updateClientPreferences: Atualiza preferências do cliente
- recordPropertyInterest: Registra interesse do cliente em um imóvel
- findPropertiesForClient: Imóveis compatíveis com o perfil do cliente
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.application.helpers.brazilian_formatters import (
    format_area,
    format_brl,
    format_datetime_br,
)
from corretor.domain.entities import (
    Client,
    ClientSource,
    ClientStatus,
    MeetingType,
    Property,
    PropertyMatch,
    PropertyStatus,
    User,
    Viewing,
    ViewingStatus,
)

logger = logging.getLogger(__name__)


class ToolExecutionError(Exception):
    """Erro com mensagem em português, devolvida para a IA."""


@dataclass
class ToolContext:
    """Dependências de uma execução de tool."""

    db: AsyncSession
    agent: Optional[User] = None


# =============================================================================
# DEFINIÇÕES DAS TOOLS (Schema OpenAI)
# =============================================================================

_PROPERTY_TYPE_HINT = "Type of property (apartamento, casa, sobrado, sala_comercial, fazenda_sitio_chacara)"

AVAILABLE_TOOLS: List[Dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": "searchProperties",
            "description": (
                "Search for properties in the database based on various filters. "
                "Use this when users ask about available properties, want to find homes/apartments/commercial spaces, "
                "or are looking for properties in specific locations or price ranges. "
                "Returns a list of matching properties with details."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "city": {"type": "string", "description": "City name to filter by"},
                    "state": {"type": "string", "description": "State code (e.g., SP, RJ) to filter by"},
                    "neighborhood": {"type": "string", "description": "Neighborhood name to filter by"},
                    "propertyType": {"type": "string", "description": _PROPERTY_TYPE_HINT},
                    "minPrice": {"type": "number", "description": "Minimum price in BRL"},
                    "maxPrice": {"type": "number", "description": "Maximum price in BRL"},
                    "minBedrooms": {"type": "integer", "description": "Minimum number of bedrooms"},
                    "maxBedrooms": {"type": "integer", "description": "Maximum number of bedrooms"},
                    "status": {"type": "string", "description": "Property status (active, sold, rented)"},
                },
                "required": [],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "getPropertyDetails",
            "description": (
                "Get detailed information about a specific property by ID. "
                "Use this when users want to know more about a particular property they've expressed interest in."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "propertyId": {"type": "string", "description": "The ID of the property to get details for"},
                },
                "required": ["propertyId"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "captureLead",
            "description": (
                "Capture client/lead information when a user expresses interest in properties or real estate services. "
                "Use this to save potential buyer/renter information including their preferences and budget. "
                "This helps real estate professionals follow up with qualified leads."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "fullName": {"type": "string", "description": "Client full name"},
                    "email": {"type": "string", "description": "Client email address"},
                    "phone": {"type": "string", "description": "Client phone number"},
                    "budgetMin": {"type": "number", "description": "Minimum budget in BRL"},
                    "budgetMax": {"type": "number", "description": "Maximum budget in BRL"},
                    "preferredNeighborhoods": {
                        "type": "array", "items": {"type": "string"}, "description": "Preferred neighborhoods"
                    },
                    "preferredPropertyTypes": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Types of properties the client is interested in",
                    },
                    "minBedrooms": {"type": "integer", "description": "Minimum number of bedrooms"},
                    "minBathrooms": {"type": "integer", "description": "Minimum number of bathrooms"},
                    "requiredFeatures": {
                        "type": "array", "items": {"type": "string"}, "description": "Required features (pool, gym, etc.)"
                    },
                    "notes": {
                        "type": "string", "description": "Additional notes about the client or their preferences"
                    },
                },
                "required": ["fullName", "phone"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "scheduleViewing",
            "description": (
                "Schedule a property viewing for a user. "
                "Use this when users want to visit a property in person. "
                "Saves the viewing appointment in the system."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "propertyId": {"type": "string", "description": "The ID of the property to visit"},
                    "scheduledAt": {"type": "string", "description": "Preferred viewing date and time (ISO format)"},
                    "meetingType": {
                        "type": "string", "enum": ["in-person", "virtual"], "description": "Type of meeting"
                    },
                    "agentNotes": {
                        "type": "string", "description": "Additional notes or requirements for the viewing"
                    },
                },
                "required": ["propertyId", "scheduledAt"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "getMarketInsights",
            "description": (
                "Get market insights and statistics for a specific city or region. "
                "Use this when users ask about market trends, average prices, "
                "or want to understand the real estate market in an area."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "city": {"type": "string", "description": "City name"},
                    "state": {"type": "string", "description": "State code (e.g., SP, RJ)"},
                    "neighborhood": {"type": "string", "description": "Neighborhood name"},
                    "propertyType": {"type": "string", "description": _PROPERTY_TYPE_HINT},
                },
                "required": [],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "getClientInfo",
            "description": (
                "Get detailed information about a specific client including their preferences, budget, and requirements. "
                "Use this when you need to understand a client's needs to find suitable properties for them."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "clientId": {"type": "string", "description": "The ID of the client to retrieve"},
                },
                "required": ["clientId"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "updateClientPreferences",
            "description": (
                "Update a client's preferences and requirements based on new information learned during conversation. "
                "Use this when the client clarifies or changes their requirements."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "clientId": {"type": "string", "description": "The ID of the client to update"},
                    "budgetMin": {"type": "number", "description": "Updated minimum budget in BRL"},
                    "budgetMax": {"type": "number", "description": "Updated maximum budget in BRL"},
                    "preferredNeighborhoods": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Updated list of preferred neighborhoods",
                    },
                    "preferredPropertyTypes": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Updated list of preferred property types",
                    },
                    "minBedrooms": {"type": "integer", "description": "Updated minimum bedrooms requirement"},
                    "minBathrooms": {"type": "integer", "description": "Updated minimum bathrooms requirement"},
                    "requiredFeatures": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Updated list of required features",
                    },
                    "notes": {"type": "string", "description": "Additional notes to append"},
                },
                "required": ["clientId"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "recordPropertyInterest",
            "description": (
                "Record a client's interest level in a specific property. "
                "Use this when a client expresses interest (positive or negative) in a property during conversation."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "clientId": {"type": "string", "description": "The ID of the client"},
                    "propertyId": {"type": "string", "description": "The ID of the property"},
                    "interestLevel": {
                        "type": "string",
                        "enum": ["high", "medium", "low", "rejected"],
                        "description": "Level of client interest",
                    },
                    "notes": {
                        "type": "string", "description": "Notes about why the client is/isn't interested"
                    },
                },
                "required": ["clientId", "propertyId", "interestLevel"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "findPropertiesForClient",
            "description": (
                "Find properties that match a specific client's preferences and budget. "
                "Use this when you need to suggest properties tailored to a client's requirements."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "clientId": {"type": "string", "description": "The ID of the client to find properties for"},
                    "limit": {
                        "type": "integer", "description": "Maximum number of properties to return (default 5)"
                    },
                },
                "required": ["clientId"],
            },
        },
    },
]


INTEREST_TEXT = {
    "high": "alto interesse",
    "medium": "interesse moderado",
    "low": "baixo interesse",
    "rejected": "não interessado",
}


# =============================================================================
# FORMATAÇÃO
# =============================================================================

def _brl_or_none(value: Any) -> Optional[str]:
    return format_brl(float(value)) if value else None


def _area_or_none(value: Any) -> Optional[str]:
    return format_area(float(value)) if value else None


def format_property_summary(prop: Property) -> Dict[str, Any]:
    """Resumo do imóvel usado nas listas devolvidas para a IA."""
    return {
        "id": str(prop.id),
        "title": prop.title,
        "price_monthly": _brl_or_none(prop.price_monthly),
        "price_total": _brl_or_none(prop.price_total),
        "condominium_fee": _brl_or_none(prop.condominium_fee),
        "type": prop.property_type,
        "listing_type": prop.listing_type,
        "location": f"{prop.address_neighborhood or ''}, {prop.address_city or ''}, {prop.address_state or ''}",
        "bedrooms": prop.bedrooms,
        "bathrooms": prop.bathrooms,
        "parking_spaces": prop.parking_spaces,
        "area": _area_or_none(prop.area_total),
        "description": prop.description,
        "features": prop.features,
        "ai_summary": prop.ai_summary,
    }


def format_property_details(prop: Property) -> Dict[str, Any]:
    return {
        "id": str(prop.id),
        "title": prop.title,
        "description": prop.description,
        "ai_summary": prop.ai_summary,
        "price_monthly": _brl_or_none(prop.price_monthly),
        "price_total": _brl_or_none(prop.price_total),
        "condominium_fee": _brl_or_none(prop.condominium_fee),
        "iptu_monthly": _brl_or_none(prop.iptu_monthly),
        "property_type": prop.property_type,
        "listing_type": prop.listing_type,
        "bedrooms": prop.bedrooms,
        "bathrooms": prop.bathrooms,
        "parking_spaces": prop.parking_spaces,
        "area_total": _area_or_none(prop.area_total),
        "area_useful": _area_or_none(prop.area_useful),
        "furnished": prop.furnished,
        "address_full": prop.address_full,
        "address_neighborhood": prop.address_neighborhood,
        "address_city": prop.address_city,
        "address_state": prop.address_state,
        "address_zipcode": prop.address_zipcode,
        "features": prop.features,
        "status": prop.status,
        "images": prop.images,
        "image_url": prop.image_url,
    }


def format_budget_range(client: Client) -> str:
    budget_min = format_brl(float(client.budget_min)) if client.budget_min else "N/A"
    budget_max = format_brl(float(client.budget_max)) if client.budget_max else "N/A"
    return f"{budget_min} - {budget_max}"


def _parse_uuid(value: Any, not_found_message: str) -> uuid.UUID:
    """IDs inventados pela IA viram 'não encontrado' em vez de erro de banco."""
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ToolExecutionError(not_found_message)


async def _get_active_client(db: AsyncSession, client_id: Any) -> Client:
    client_uuid = _parse_uuid(client_id, "Cliente não encontrado")
    result = await db.execute(
        select(Client).where(Client.id == client_uuid, Client.not_deleted())
    )
    client = result.scalar_one_or_none()
    if not client:
        raise ToolExecutionError("Cliente não encontrado")
    return client


# =============================================================================
# QUERIES
# =============================================================================

def build_search_properties_query(args: Dict[str, Any]) -> Select:
    """Filtros do searchProperties (status padrão: active, mais novos primeiro)."""
    query = select(Property).where(Property.not_deleted())

    if args.get("city"):
        query = query.where(Property.address_city.ilike(f"%{args['city']}%"))
    if args.get("state"):
        query = query.where(Property.address_state == args["state"])
    if args.get("neighborhood"):
        query = query.where(Property.address_neighborhood.ilike(f"%{args['neighborhood']}%"))
    if args.get("propertyType"):
        query = query.where(Property.property_type == args["propertyType"])

    min_price = args.get("minPrice")
    if min_price:
        query = query.where(or_(Property.price_monthly >= min_price, Property.price_total >= min_price))
    max_price = args.get("maxPrice")
    if max_price:
        query = query.where(or_(Property.price_monthly <= max_price, Property.price_total <= max_price))

    if args.get("minBedrooms"):
        query = query.where(Property.bedrooms >= args["minBedrooms"])
    if args.get("maxBedrooms"):
        query = query.where(Property.bedrooms <= args["maxBedrooms"])

    query = query.where(Property.status == (args.get("status") or PropertyStatus.ACTIVE.value))

    return query.order_by(Property.created_at.desc()).limit(10)


def build_client_match_query(client: Client, limit: int = 5) -> Select:
    """Imóveis ativos dentro do orçamento, tipos e mínimos do cliente."""
    query = select(Property).where(
        Property.status == PropertyStatus.ACTIVE.value,
        Property.not_deleted(),
    )

    budget_min = client.budget_min
    budget_max = client.budget_max

    if budget_min and budget_max:
        query = query.where(
            or_(
                and_(Property.price_monthly >= budget_min, Property.price_monthly <= budget_max),
                and_(Property.price_total >= budget_min, Property.price_total <= budget_max),
            )
        )
    elif budget_min:
        query = query.where(or_(Property.price_monthly >= budget_min, Property.price_total >= budget_min))
    elif budget_max:
        query = query.where(or_(Property.price_monthly <= budget_max, Property.price_total <= budget_max))

    if client.preferred_property_types:
        query = query.where(Property.property_type.in_(client.preferred_property_types))

    if client.min_bedrooms:
        query = query.where(Property.bedrooms >= client.min_bedrooms)

    if client.min_bathrooms:
        query = query.where(Property.bathrooms >= client.min_bathrooms)

    return query.limit(limit)


# =============================================================================
# EXECUTORES
# =============================================================================

async def _exec_search_properties(args: Dict, ctx: ToolContext) -> Any:
    result = await ctx.db.execute(build_search_properties_query(args))
    properties = result.scalars().all()

    if not properties:
        raise ToolExecutionError("Nenhum imóvel encontrado com os critérios especificados")

    logger.info(f"🏠 searchProperties: {len(properties)} imóveis")
    return [format_property_summary(p) for p in properties]


async def _exec_get_property_details(args: Dict, ctx: ToolContext) -> Any:
    property_id = _parse_uuid(args.get("propertyId"), "Imóvel não encontrado")
    result = await ctx.db.execute(
        select(Property).where(Property.id == property_id, Property.not_deleted())
    )
    prop = result.scalar_one_or_none()

    if not prop:
        raise ToolExecutionError("Imóvel não encontrado")

    return format_property_details(prop)


async def _exec_capture_lead(args: Dict, ctx: ToolContext) -> Any:
    client = Client(
        id=uuid.uuid4(),
        full_name=args.get("fullName"),
        email=args.get("email"),
        phone=args.get("phone"),
        budget_min=args.get("budgetMin"),
        budget_max=args.get("budgetMax"),
        preferred_neighborhoods=args.get("preferredNeighborhoods") or [],
        preferred_property_types=args.get("preferredPropertyTypes") or [],
        min_bedrooms=args.get("minBedrooms"),
        min_bathrooms=args.get("minBathrooms"),
        required_features=args.get("requiredFeatures") or [],
        status=ClientStatus.ACTIVE.value,
        source=ClientSource.AI_ASSISTANT.value,
        notes=args.get("notes"),
        agent_id=ctx.agent.id if ctx.agent else None,
    )

    try:
        ctx.db.add(client)
        await ctx.db.flush()
    except Exception as e:
        raise ToolExecutionError(f"Erro ao cadastrar cliente: {e}")

    logger.info(f"👤 Lead capturado pelo assistente: {client.id}")

    return {
        "message": f"Cliente cadastrado com sucesso! Entraremos em contato com {args.get('fullName')} em breve.",
        "clientId": str(client.id),
    }


async def _exec_schedule_viewing(args: Dict, ctx: ToolContext) -> Any:
    if not ctx.agent:
        raise ToolExecutionError("Usuário deve estar logado para agendar visitas")

    property_id = _parse_uuid(args.get("propertyId"), "Imóvel não encontrado")
    result = await ctx.db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()

    if not prop:
        raise ToolExecutionError("Imóvel não encontrado")

    try:
        scheduled_at = datetime.fromisoformat(str(args.get("scheduledAt")).replace("Z", "+00:00"))
    except ValueError:
        raise ToolExecutionError("Data da visita inválida, use o formato ISO (ex: 2025-03-10T14:00:00)")

    meeting_type = args.get("meetingType") or MeetingType.IN_PERSON.value
    agent_notes = args.get("agentNotes")

    viewing = Viewing(
        property_id=prop.id,
        agent_id=ctx.agent.id,
        scheduled_at=scheduled_at,
        status=ViewingStatus.SCHEDULED.value,
        meeting_type=meeting_type,
        agent_notes=agent_notes,
    )

    try:
        ctx.db.add(viewing)
        await ctx.db.flush()
    except Exception as e:
        raise ToolExecutionError(f"Erro ao agendar visita: {e}")

    location = (
        f"{prop.address_neighborhood}, {prop.address_city}"
        if prop.address_neighborhood
        else prop.address_city
    )
    meeting_label = "Virtual" if meeting_type == MeetingType.VIRTUAL.value else "Presencial"
    notes_text = f"Observações: {agent_notes}" if agent_notes else ""

    return {
        "message": (
            f"Visita agendada com sucesso!\n\n"
            f"Imóvel: {prop.title}\n"
            f"Localização: {location}\n"
            f"Data: {format_datetime_br(scheduled_at, with_seconds=True)}\n"
            f"Tipo: {meeting_label}\n\n"
            f"{notes_text}"
        )
    }


def compute_market_stats(rows: List[Any], args: Dict[str, Any]) -> Dict[str, Any]:
    """Estatísticas de aluguel, venda, área média e tipos."""
    stats: Dict[str, Any] = {
        "totalProperties": len(rows),
        "location": (
            f"{args.get('neighborhood') or ''} {args.get('city') or 'Todas as cidades'}, "
            f"{args.get('state') or 'Todos os estados'}"
        ),
    }

    rental_prices = [float(r.price_monthly) for r in rows if r.listing_type == "rent" and r.price_monthly]
    sale_prices = [float(r.price_total) for r in rows if r.listing_type == "sale" and r.price_total]

    if rental_prices:
        stats["rental"] = {
            "count": len(rental_prices),
            "averagePrice": format_brl(sum(rental_prices) / len(rental_prices)),
            "priceRange": {"min": format_brl(min(rental_prices)), "max": format_brl(max(rental_prices))},
        }

    if sale_prices:
        stats["sale"] = {
            "count": len(sale_prices),
            "averagePrice": format_brl(sum(sale_prices) / len(sale_prices)),
            "priceRange": {"min": format_brl(min(sale_prices)), "max": format_brl(max(sale_prices))},
        }

    areas = [float(r.area_total) for r in rows if r.area_total]
    if areas:
        stats["averageArea"] = format_area(sum(areas) / len(areas))

    type_distribution: Dict[str, int] = {}
    for r in rows:
        if r.property_type:
            type_distribution[r.property_type] = type_distribution.get(r.property_type, 0) + 1
    stats["typeDistribution"] = type_distribution

    return stats


async def _exec_get_market_insights(args: Dict, ctx: ToolContext) -> Any:
    try:
        query = select(
            Property.price_monthly,
            Property.price_total,
            Property.area_total,
            Property.property_type,
            Property.bedrooms,
            Property.listing_type,
        ).where(Property.status == PropertyStatus.ACTIVE.value, Property.not_deleted())

        # Bairro quase sempre vazio: filtra só por cidade/UF
        if args.get("city"):
            query = query.where(Property.address_city.ilike(f"%{args['city']}%"))
        if args.get("state"):
            query = query.where(Property.address_state == args["state"])
        if args.get("propertyType"):
            query = query.where(Property.property_type == args["propertyType"])

        result = await ctx.db.execute(query)
        rows = result.all()

        if not rows:
            raise ToolExecutionError("Não há dados disponíveis para esta localização")

        return compute_market_stats(rows, args)

    except ToolExecutionError:
        raise
    except Exception as e:
        raise ToolExecutionError(f"Erro ao buscar dados: {e}")


async def _exec_get_client_info(args: Dict, ctx: ToolContext) -> Any:
    client = await _get_active_client(ctx.db, args.get("clientId"))

    return {
        "id": str(client.id),
        "name": client.full_name,
        "email": client.email,
        "phone": client.phone,
        "budget": {
            "min": _brl_or_none(client.budget_min),
            "max": _brl_or_none(client.budget_max),
            "min_raw": float(client.budget_min) if client.budget_min is not None else None,
            "max_raw": float(client.budget_max) if client.budget_max is not None else None,
        },
        "preferences": {
            "neighborhoods": client.preferred_neighborhoods or [],
            "propertyTypes": client.preferred_property_types or [],
            "minBedrooms": client.min_bedrooms,
            "minBathrooms": client.min_bathrooms,
            "requiredFeatures": client.required_features or [],
        },
        "status": client.status,
        "notes": client.notes,
        "created_at": client.created_at.isoformat() if client.created_at else None,
    }


async def _exec_update_client_preferences(args: Dict, ctx: ToolContext) -> Any:
    client = await _get_active_client(ctx.db, args.get("clientId"))

    update_data: Dict[str, Any] = {}
    if args.get("budgetMin") is not None:
        update_data["budget_min"] = args["budgetMin"]
    if args.get("budgetMax") is not None:
        update_data["budget_max"] = args["budgetMax"]
    if args.get("preferredNeighborhoods"):
        update_data["preferred_neighborhoods"] = args["preferredNeighborhoods"]
    if args.get("preferredPropertyTypes"):
        update_data["preferred_property_types"] = args["preferredPropertyTypes"]
    if args.get("minBedrooms") is not None:
        update_data["min_bedrooms"] = args["minBedrooms"]
    if args.get("minBathrooms") is not None:
        update_data["min_bathrooms"] = args["minBathrooms"]
    if args.get("requiredFeatures"):
        update_data["required_features"] = args["requiredFeatures"]

    if args.get("notes"):
        timestamp = format_datetime_br(datetime.now(), with_seconds=True)
        entry = f"[{timestamp}] {args['notes']}"
        update_data["notes"] = f"{client.notes}\n\n{entry}" if client.notes else entry

    try:
        for key, value in update_data.items():
            setattr(client, key, value)
        await ctx.db.flush()
    except Exception as e:
        raise ToolExecutionError(f"Erro ao atualizar preferências do cliente: {e}")

    return {
        "message": "Preferências do cliente atualizadas com sucesso!",
        "updated": list(update_data.keys()),
    }


async def _exec_record_property_interest(args: Dict, ctx: ToolContext) -> Any:
    client_id = _parse_uuid(args.get("clientId"), "Cliente não encontrado")
    property_id = _parse_uuid(args.get("propertyId"), "Imóvel não encontrado")
    interest_level = args.get("interestLevel")

    if interest_level not in INTEREST_TEXT:
        raise ToolExecutionError(f"Nível de interesse inválido: {interest_level}")

    notes = args.get("notes")

    result = await ctx.db.execute(
        select(PropertyMatch).where(
            PropertyMatch.client_id == client_id,
            PropertyMatch.property_id == property_id,
        )
    )
    match = result.scalar_one_or_none()

    try:
        if match:
            match.status = interest_level
            if notes:
                match.match_reasons = {"notes": notes}
        else:
            ctx.db.add(
                PropertyMatch(
                    client_id=client_id,
                    property_id=property_id,
                    status=interest_level,
                    match_reasons={"notes": notes} if notes else None,
                    sent_by=ctx.agent.id if ctx.agent else None,
                )
            )
        await ctx.db.flush()
    except Exception as e:
        action = "atualizar" if match else "registrar"
        raise ToolExecutionError(f"Erro ao {action} interesse: {e}")

    return {
        "message": (
            f'Interesse registrado com sucesso! Cliente marcado como "{INTEREST_TEXT[interest_level]}" neste imóvel.'
        )
    }


async def _exec_find_properties_for_client(args: Dict, ctx: ToolContext) -> Any:
    client = await _get_active_client(ctx.db, args.get("clientId"))
    limit = args.get("limit") or 5

    try:
        result = await ctx.db.execute(build_client_match_query(client, limit))
        properties = result.scalars().all()
    except Exception as e:
        raise ToolExecutionError(f"Erro ao buscar imóveis: {e}")

    if not properties:
        return {
            "message": (
                "Nenhum imóvel encontrado que corresponda exatamente às preferências do cliente. "
                "Considere ajustar os filtros."
            ),
            "properties": [],
            "clientPreferences": {
                "budget": format_budget_range(client),
                "neighborhoods": client.preferred_neighborhoods,
                "propertyTypes": client.preferred_property_types,
                "minBedrooms": client.min_bedrooms,
                "minBathrooms": client.min_bathrooms,
            },
        }

    return {
        "message": f"Encontrei {len(properties)} imóveis que correspondem às preferências do cliente.",
        "properties": [format_property_summary(p) for p in properties],
        "clientInfo": {
            "name": client.full_name,
            "budget": format_budget_range(client),
        },
    }


ToolExecutor = Callable[[Dict[str, Any], ToolContext], Awaitable[Any]]

TOOL_EXECUTORS: Dict[str, ToolExecutor] = {
    "searchProperties": _exec_search_properties,
    "getPropertyDetails": _exec_get_property_details,
    "captureLead": _exec_capture_lead,
    "scheduleViewing": _exec_schedule_viewing,
    "getMarketInsights": _exec_get_market_insights,
    "getClientInfo": _exec_get_client_info,
    "updateClientPreferences": _exec_update_client_preferences,
    "recordPropertyInterest": _exec_record_property_interest,
    "findPropertiesForClient": _exec_find_properties_for_client,
}


# =============================================================================
# EXECUTOR PRINCIPAL
# =============================================================================

async def execute_tool(tool_name: str, arguments: Dict[str, Any], ctx: ToolContext) -> Any:
    """
    Executa uma tool e retorna o resultado.

    Erros nunca sobem: viram {"error": mensagem} para a IA responder ao corretor.
    Cada tool roda num savepoint; se falhar, só o trabalho dela é desfeito
    e a sessão continua usável pelas próximas tools e pelo histórico.
    """
    logger.info(f"🔧 Executando tool: {tool_name} com args: {arguments}")

    executor = TOOL_EXECUTORS.get(tool_name)
    if not executor:
        logger.error(f"Tool desconhecida: {tool_name}")
        return {"error": f"Ferramenta desconhecida: {tool_name}"}

    try:
        async with ctx.db.begin_nested():
            result = await executor(arguments, ctx)
        logger.info(f"✅ Tool {tool_name} executada com sucesso")
        return result
    except Exception as e:
        logger.error(f"❌ Erro executando tool {tool_name}: {e}")
        return {"error": str(e)}

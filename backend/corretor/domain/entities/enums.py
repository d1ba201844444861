"""Enums - valores fixos que se repetem no sistema."""

from enum import Enum


class PropertyType(str, Enum):
    """Tipos de imóvel."""
    APARTMENT = "apartamento"
    HOUSE = "casa"
    DUPLEX = "sobrado"
    COMMERCIAL = "sala_comercial"
    LAND = "terreno"
    FARM = "fazenda_sitio_chacara"
    LOFT = "loft"
    PENTHOUSE = "cobertura"


# Tipos residenciais que deveriam informar quartos
RESIDENTIAL_TYPES = {
    PropertyType.APARTMENT.value,
    PropertyType.HOUSE.value,
    PropertyType.DUPLEX.value,
    PropertyType.LOFT.value,
    PropertyType.PENTHOUSE.value,
}


class ListingType(str, Enum):
    """Modalidade do anúncio."""
    RENT = "rent"
    SALE = "sale"


class FurnishedStatus(str, Enum):
    FURNISHED = "furnished"
    UNFURNISHED = "unfurnished"
    SEMI_FURNISHED = "semi_furnished"


class PropertyStatus(str, Enum):
    """Situação do imóvel no catálogo."""
    ACTIVE = "active"
    SOLD = "sold"
    RENTED = "rented"
    INACTIVE = "inactive"


class ClientStatus(str, Enum):
    """Situação do cliente na carteira do corretor."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    CONVERTED = "converted"
    LOST = "lost"


class ClientSource(str, Enum):
    """Origem do cliente."""
    MANUAL = "manual"
    AI_ASSISTANT = "ai_assistant"
    WEBSITE = "website"
    REFERRAL = "referral"


class InterestLevel(str, Enum):
    """Interesse do cliente em um imóvel."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    REJECTED = "rejected"


class ViewingStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class MeetingType(str, Enum):
    IN_PERSON = "in-person"
    VIRTUAL = "virtual"


class ConversationType(str, Enum):
    """Tipo de conversa registrada com o assistente."""
    GENERAL = "general"
    CLIENT = "client"

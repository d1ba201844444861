"""Entidades do domínio."""
from .base import Base, TimestampMixin, SoftDeleteMixin, UUIDPrimaryKeyMixin
from .enums import (
    PropertyType,
    RESIDENTIAL_TYPES,
    ListingType,
    FurnishedStatus,
    PropertyStatus,
    ClientStatus,
    ClientSource,
    InterestLevel,
    ViewingStatus,
    MeetingType,
    ConversationType,
)
from .user import User
from .property import Property
from .client import Client
from .viewing import Viewing
from .property_match import PropertyMatch
from .ai_conversation import AIConversation

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "SoftDeleteMixin",
    "UUIDPrimaryKeyMixin",
    # Enums
    "PropertyType",
    "RESIDENTIAL_TYPES",
    "ListingType",
    "FurnishedStatus",
    "PropertyStatus",
    "ClientStatus",
    "ClientSource",
    "InterestLevel",
    "ViewingStatus",
    "MeetingType",
    "ConversationType",
    # Models
    "User",
    "Property",
    "Client",
    "Viewing",
    "PropertyMatch",
    "AIConversation",
]

"""Rotas da API."""

from .chat import router as chat_router
from .clients import router as clients_router
from .dashboard import router as dashboard_router
from .health import router as health_router
from .properties import router as properties_router

__all__ = [
    "chat_router",
    "clients_router",
    "dashboard_router",
    "health_router",
    "properties_router",
]

"""Acesso ao banco de dados."""
from .connection import engine, async_session, get_db, init_db

__all__ = ["engine", "async_session", "get_db", "init_db"]

"""Camada HTTP (FastAPI)."""

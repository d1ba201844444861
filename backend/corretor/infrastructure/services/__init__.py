"""Serviços de infraestrutura (IA, busca semântica, analytics)."""

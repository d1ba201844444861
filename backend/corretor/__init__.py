"""Corretor IA - backend imobiliário com busca semântica e assistente."""

__version__ = "0.1.0"

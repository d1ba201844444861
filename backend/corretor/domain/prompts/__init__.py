"""Prompts usados pelos serviços de IA."""

"""Scripts de manutenção (rodar com python -m corretor.scripts.<nome>)."""

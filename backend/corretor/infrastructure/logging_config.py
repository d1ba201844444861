"""
LOGGING
=======

JSON (uma linha por evento) para a API e texto legível para os scripts
de manutenção rodados no terminal.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Bibliotecas que poluem o log em INFO
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "multipart", "asyncio")


class JSONFormatter(logging.Formatter):
    """Evento de log como objeto JSON; campos de extra={"extra": {...}} entram na raiz."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            log_record.update(extra)

        return json.dumps(log_record, default=str, ensure_ascii=False)


def setup_logging(level: int = logging.INFO, json_format: bool = True) -> None:
    """Configura o logger raiz (chamado no lifespan da API e no início dos scripts)."""
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(CONSOLE_FORMAT))
    root.handlers = [handler]

    # uvicorn propaga para o raiz
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).handlers = []

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

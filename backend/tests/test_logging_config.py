"""
TESTES - LOGGING
================
"""

import json
import logging

from corretor.infrastructure.logging_config import JSONFormatter, setup_logging


def _record(**kwargs) -> logging.LogRecord:
    return logging.LogRecord(
        name="corretor.teste", level=logging.INFO, pathname=__file__, lineno=10,
        msg="🏠 Imóvel %s criado", args=("abc",), exc_info=None, **kwargs,
    )


def test_json_formatter_fields():
    payload = json.loads(JSONFormatter().format(_record()))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "corretor.teste"
    assert payload["message"] == "🏠 Imóvel abc criado"
    assert payload["timestamp"].endswith("+00:00")


def test_json_formatter_merges_extra():
    record = _record()
    record.extra = {"property_id": "abc", "tokens": 120}

    payload = json.loads(JSONFormatter().format(record))

    assert payload["property_id"] == "abc"
    assert payload["tokens"] == 120


def test_setup_logging_console_mode():
    root = logging.getLogger()
    previous_handlers, previous_level = root.handlers[:], root.level

    try:
        setup_logging(logging.DEBUG, json_format=False)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("openai").level == logging.WARNING
    finally:
        root.handlers = previous_handlers
        root.setLevel(previous_level)

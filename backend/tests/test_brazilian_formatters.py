"""Formatadores pt-BR."""

from datetime import datetime
from decimal import Decimal

from corretor.application.helpers.brazilian_formatters import (
    BRAZILIAN_STATES,
    format_area,
    format_brl,
    format_cep,
    format_date_br,
    format_datetime_br,
    format_locale_number,
    format_number,
    format_phone,
    validate_cep,
    validate_phone,
)


def test_format_brl():
    assert format_brl(1234567.89) == "R$ 1.234.567,89"
    assert format_brl(0) == "R$ 0,00"
    assert format_brl(Decimal("2500")) == "R$ 2.500,00"
    assert format_brl(-10.5) == "-R$ 10,50"


def test_format_brl_rounds_half_up():
    assert format_brl(0.125) == "R$ 0,13"


def test_format_cep():
    assert format_cep("12345678") == "12345-678"
    assert format_cep("12345-678") == "12345-678"
    assert format_cep("1234") == "1234"


def test_format_phone_mobile_and_landline():
    assert format_phone("11987654321") == "(11) 98765-4321"
    assert format_phone("1134567890") == "(11) 3456-7890"
    assert format_phone("(11) 98765-4321") == "(11) 98765-4321"


def test_format_phone_invalid_returns_input():
    assert format_phone("123") == "123"


def test_format_area():
    assert format_area(120) == "120 m²"
    assert format_area(1234.56) == "1.234,56 m²"
    assert format_area(85.5) == "85,5 m²"


def test_numbers():
    assert format_number(1234.5, 2) == "1.234,50"
    assert format_number(1234.5) == "1.235"
    assert format_locale_number(500000) == "500.000"


def test_dates():
    assert format_date_br("2024-12-31") == "31/12/2024"
    assert format_date_br(datetime(2024, 1, 5, 10, 0)) == "05/01/2024"
    assert format_datetime_br(datetime(2024, 12, 31, 14, 30)) == "31/12/2024 14:30"
    assert format_datetime_br("2024-12-31T14:30:15Z", with_seconds=True) == "31/12/2024 14:30:15"


def test_validators():
    assert validate_cep("12345-678")
    assert not validate_cep("1234")
    assert validate_phone("(11) 98765-4321")
    assert validate_phone("1134567890")
    assert not validate_phone("12345")


def test_states_list():
    assert len(BRAZILIAN_STATES) == 27
    assert {"code": "SP", "name": "São Paulo"} in BRAZILIAN_STATES

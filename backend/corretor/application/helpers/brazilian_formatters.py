"""
FORMATADORES BRASILEIROS
========================

Funções puras para exibir valores no padrão pt-BR:
- Moeda (R$ 1.234.567,89)
- CEP (12345-678)
- Telefone ((11) 98765-4321 / (11) 3456-7890)
- Datas (31/12/2024)
- Área (1.234,56 m²)
"""

import re
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, Decimal]

_NON_DIGITS = re.compile(r"\D")


def _only_digits(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def _format_decimal(value: Number, min_decimals: int, max_decimals: int) -> str:
    """Agrupa milhares com '.' e separa decimais com ',' (arredondamento half-up)."""
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    quantum = Decimal(1).scaleb(-max_decimals)
    amount = amount.quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if amount < 0 else ""
    integer_part, _, fraction = f"{abs(amount):f}".partition(".")

    while len(fraction) > min_decimals and fraction.endswith("0"):
        fraction = fraction[:-1]

    grouped = f"{int(integer_part):,}".replace(",", ".")
    return f"{sign}{grouped},{fraction}" if fraction else f"{sign}{grouped}"


def format_brl(value: Number) -> str:
    """Formata número como Real: 1234567.89 -> 'R$ 1.234.567,89'."""
    formatted = _format_decimal(value, 2, 2)
    if formatted.startswith("-"):
        return f"-R$ {formatted[1:]}"
    return f"R$ {formatted}"


def format_cep(cep: str) -> str:
    """Formata CEP como 12345-678. Entradas sem 8 dígitos voltam intactas."""
    cleaned = _only_digits(cep)
    if len(cleaned) == 8:
        return f"{cleaned[:5]}-{cleaned[5:]}"
    return cep


def format_phone(phone: str) -> str:
    """Formata celular (11 dígitos) ou fixo (10 dígitos). Outros valores voltam intactos."""
    cleaned = _only_digits(phone)

    if len(cleaned) == 11:
        return f"({cleaned[:2]}) {cleaned[2:7]}-{cleaned[7:]}"

    if len(cleaned) == 10:
        return f"({cleaned[:2]}) {cleaned[2:6]}-{cleaned[6:]}"

    return phone


def _to_datetime(value: Union[date, datetime, str]) -> Union[date, datetime]:
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value


def format_date_br(value: Union[date, datetime, str]) -> str:
    """Data no formato 31/12/2024."""
    return _to_datetime(value).strftime("%d/%m/%Y")


def format_datetime_br(value: Union[datetime, str], with_seconds: bool = False) -> str:
    """Data e hora no formato 31/12/2024 14:30 (ou 14:30:00)."""
    pattern = "%d/%m/%Y %H:%M:%S" if with_seconds else "%d/%m/%Y %H:%M"
    return _to_datetime(value).strftime(pattern)


def format_area(area: Number) -> str:
    """Área em m² com até 2 casas: 120 -> '120 m²', 1234.56 -> '1.234,56 m²'."""
    return f"{_format_decimal(area, 0, 2)} m²"


def format_number(value: Number, decimals: int = 0) -> str:
    """Número pt-BR com casas decimais fixas."""
    return _format_decimal(value, decimals, decimals)


def format_locale_number(value: Number) -> str:
    """Número pt-BR com até 3 casas decimais (500000 -> '500.000')."""
    return _format_decimal(value, 0, 3)


def validate_cep(value: str) -> bool:
    return len(_only_digits(value)) == 8


def validate_phone(value: str) -> bool:
    return len(_only_digits(value)) in (10, 11)


BRAZILIAN_STATES = [
    {"code": "AC", "name": "Acre"},
    {"code": "AL", "name": "Alagoas"},
    {"code": "AP", "name": "Amapá"},
    {"code": "AM", "name": "Amazonas"},
    {"code": "BA", "name": "Bahia"},
    {"code": "CE", "name": "Ceará"},
    {"code": "DF", "name": "Distrito Federal"},
    {"code": "ES", "name": "Espírito Santo"},
    {"code": "GO", "name": "Goiás"},
    {"code": "MA", "name": "Maranhão"},
    {"code": "MT", "name": "Mato Grosso"},
    {"code": "MS", "name": "Mato Grosso do Sul"},
    {"code": "MG", "name": "Minas Gerais"},
    {"code": "PA", "name": "Pará"},
    {"code": "PB", "name": "Paraíba"},
    {"code": "PR", "name": "Paraná"},
    {"code": "PE", "name": "Pernambuco"},
    {"code": "PI", "name": "Piauí"},
    {"code": "RJ", "name": "Rio de Janeiro"},
    {"code": "RN", "name": "Rio Grande do Norte"},
    {"code": "RS", "name": "Rio Grande do Sul"},
    {"code": "RO", "name": "Rondônia"},
    {"code": "RR", "name": "Roraima"},
    {"code": "SC", "name": "Santa Catarina"},
    {"code": "SP", "name": "São Paulo"},
    {"code": "SE", "name": "Sergipe"},
    {"code": "TO", "name": "Tocantins"},
]

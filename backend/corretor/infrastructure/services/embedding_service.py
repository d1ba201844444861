"""
SERVIÇO DE EMBEDDINGS - Vetores para busca semântica
=====================================================

Gera embeddings de imóveis, preferências de clientes e consultas livres.

Modelo: text-embedding-3-small (1536 dimensões, $0.02 por 1M tokens)

Fluxo:
1. Monta um texto descritivo (property_to_text / client_preferences_to_text)
2. Chama a API de embeddings (com retry em 429 e erros 5xx)
3. Grava o vetor em properties.ai_embedding ou clients.preferences_embedding
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, List, Optional, Sequence

from openai import APIStatusError
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.application.helpers.brazilian_formatters import format_locale_number
from corretor.domain.entities import Client, Property
from corretor.infrastructure.llm import LLMFactory

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 1.0
BATCH_DELAY_SECONDS = 0.05
COST_PER_MILLION_TOKENS = 0.02

PROPERTY_TYPE_LABELS = {
    "apartamento": "apartamento",
    "casa": "casa",
    "sobrado": "sobrado",
    "sala_comercial": "sala comercial",
    "terreno": "terreno",
    "fazenda_sitio_chacara": "fazenda, sítio ou chácara",
    "loft": "loft",
    "cobertura": "cobertura",
}

ProgressCallback = Callable[[int, int], None]


class EmbeddingError(Exception):
    """Falha ao gerar embedding de uma consulta."""


@dataclass
class EmbeddingGenerationResult:
    """Resultado da geração de embedding para um imóvel ou cliente."""

    success: bool
    id: Any
    embedding: Optional[List[float]] = None
    error: Optional[str] = None
    tokens_used: int = 0


@dataclass
class BatchEmbeddingStats:
    total: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    total_tokens: int = 0
    estimated_cost: float = 0.0


# =============================================================================
# TEXTOS PARA EMBEDDING
# =============================================================================

def _plain_number(value: Any) -> str:
    """Renderiza número sem zeros à direita (85.50 -> '85.5', 120.0 -> '120')."""
    number = float(value) if isinstance(value, (Decimal, float)) else value
    if isinstance(number, float) and number.is_integer():
        return str(int(number))
    return str(number)


def property_to_text(prop: Property) -> str:
    """
    Constrói o texto descritivo do imóvel.

    Ordem: título, descrição, resumo IA, tipo + modalidade, medidas,
    localização e características.
    """
    parts: List[str] = []

    if prop.title:
        parts.append(prop.title)
    if prop.description:
        parts.append(prop.description)
    if prop.ai_summary:
        parts.append(prop.ai_summary)

    if prop.property_type:
        type_text = PROPERTY_TYPE_LABELS.get(prop.property_type, prop.property_type)
        listing_text = "para alugar" if prop.listing_type == "rent" else "para vender"
        parts.append(f"{type_text} {listing_text}")

    specs: List[str] = []
    if prop.bedrooms:
        specs.append(f"{prop.bedrooms} quartos")
    if prop.bathrooms:
        specs.append(f"{prop.bathrooms} banheiros")
    if prop.parking_spaces:
        specs.append(f"{prop.parking_spaces} vagas")
    if prop.area_total:
        specs.append(f"{_plain_number(prop.area_total)}m²")
    if specs:
        parts.append(", ".join(specs))

    location = [
        value
        for value in (prop.address_neighborhood, prop.address_city, prop.address_state)
        if value
    ]
    if location:
        parts.append(f"Localização: {', '.join(location)}")

    if isinstance(prop.features, list):
        features_text = ", ".join(str(f) for f in prop.features)
        if features_text:
            parts.append(f"Características: {features_text}")

    return ". ".join(p for p in parts if p)


def client_preferences_to_text(client: Client) -> str:
    """Constrói o texto das preferências do cliente (orçamento, tipos, requisitos...)."""
    parts: List[str] = []

    if client.budget_min or client.budget_max:
        budget_parts: List[str] = []
        if client.budget_min:
            budget_parts.append(f"a partir de R$ {format_locale_number(client.budget_min)}")
        if client.budget_max:
            budget_parts.append(f"até R$ {format_locale_number(client.budget_max)}")
        parts.append(f"Orçamento: {' '.join(budget_parts)}")

    if client.preferred_property_types:
        types = ", ".join(PROPERTY_TYPE_LABELS.get(t, t) for t in client.preferred_property_types)
        parts.append(f"Tipos de imóvel: {types}")

    requirements: List[str] = []
    if client.min_bedrooms:
        requirements.append(f"pelo menos {client.min_bedrooms} quartos")
    if client.min_bathrooms:
        requirements.append(f"pelo menos {client.min_bathrooms} banheiros")
    if requirements:
        parts.append(f"Requisitos: {', '.join(requirements)}")

    if client.preferred_neighborhoods:
        parts.append(f"Bairros preferidos: {', '.join(client.preferred_neighborhoods)}")

    if client.required_features:
        parts.append(f"Características essenciais: {', '.join(client.required_features)}")

    if client.notes:
        parts.append(client.notes)

    return ". ".join(p for p in parts if p)


# =============================================================================
# GERAÇÃO
# =============================================================================

async def _generate_embedding_with_retry(text: str) -> tuple[List[float], int]:
    """Chama a API com backoff exponencial em rate limit (429) e erros 5xx."""
    provider = LLMFactory.get_provider()
    retries = 0

    while True:
        try:
            result = await provider.generate_embeddings(text)
            return result["embedding"], result.get("tokens_used", 0)
        except APIStatusError as e:
            retriable = e.status_code == 429 or e.status_code >= 500
            if retries >= MAX_RETRIES or not retriable:
                raise
            delay = RETRY_DELAY_SECONDS * (2 ** retries)
            retries += 1
            logger.warning(
                f"⚠️ Erro OpenAI ({e.status_code}), nova tentativa em {delay:.1f}s "
                f"({retries}/{MAX_RETRIES})"
            )
            await asyncio.sleep(delay)


async def generate_property_embedding(prop: Property) -> EmbeddingGenerationResult:
    """Gera embedding de um imóvel. Nunca levanta exceção: falhas vão no resultado."""
    try:
        text = property_to_text(prop)
        if not text.strip():
            return EmbeddingGenerationResult(
                success=False, id=prop.id, error="No text content to generate embedding"
            )

        embedding, tokens_used = await _generate_embedding_with_retry(text)
        return EmbeddingGenerationResult(
            success=True, id=prop.id, embedding=embedding, tokens_used=tokens_used
        )
    except Exception as e:
        logger.error(f"❌ Erro gerando embedding do imóvel {prop.id}: {e}")
        return EmbeddingGenerationResult(success=False, id=prop.id, error=str(e) or "Unknown error")


async def generate_client_embedding(client: Client) -> EmbeddingGenerationResult:
    """Gera embedding das preferências de um cliente."""
    try:
        text = client_preferences_to_text(client)
        if not text.strip():
            return EmbeddingGenerationResult(
                success=False, id=client.id, error="No preferences to generate embedding"
            )

        embedding, tokens_used = await _generate_embedding_with_retry(text)
        return EmbeddingGenerationResult(
            success=True, id=client.id, embedding=embedding, tokens_used=tokens_used
        )
    except Exception as e:
        logger.error(f"❌ Erro gerando embedding do cliente {client.id}: {e}")
        return EmbeddingGenerationResult(success=False, id=client.id, error=str(e) or "Unknown error")


async def generate_query_embedding(query: str) -> List[float]:
    """Gera embedding de uma consulta em linguagem natural."""
    if not query or not query.strip():
        raise EmbeddingError("Query cannot be empty")

    try:
        embedding, _ = await _generate_embedding_with_retry(query)
    except Exception as e:
        logger.error(f"❌ Erro gerando embedding da consulta: {e}")
        raise EmbeddingError(f"Failed to generate query embedding: {e}") from e

    return embedding


async def _batch_generate(
    items: Sequence[Any],
    generator: Callable,
    on_progress: Optional[ProgressCallback],
) -> List[EmbeddingGenerationResult]:
    results: List[EmbeddingGenerationResult] = []
    total = len(items)

    for index, item in enumerate(items):
        results.append(await generator(item))

        if on_progress:
            on_progress(index + 1, total)

        # Pequeno intervalo entre chamadas para evitar rate limit
        if index < total - 1:
            await asyncio.sleep(BATCH_DELAY_SECONDS)

    return results


async def batch_generate_property_embeddings(
    properties: Sequence[Property],
    on_progress: Optional[ProgressCallback] = None,
) -> List[EmbeddingGenerationResult]:
    return await _batch_generate(properties, generate_property_embedding, on_progress)


async def batch_generate_client_embeddings(
    clients: Sequence[Client],
    on_progress: Optional[ProgressCallback] = None,
) -> List[EmbeddingGenerationResult]:
    return await _batch_generate(clients, generate_client_embedding, on_progress)


# =============================================================================
# PERSISTÊNCIA
# =============================================================================

async def save_property_embedding(db: AsyncSession, property_id: Any, embedding: List[float]) -> None:
    await db.execute(
        update(Property).where(Property.id == property_id).values(ai_embedding=embedding)
    )


async def save_client_embedding(db: AsyncSession, client_id: Any, embedding: List[float]) -> None:
    await db.execute(
        update(Client).where(Client.id == client_id).values(preferences_embedding=embedding)
    )


# =============================================================================
# CUSTO
# =============================================================================

def calculate_embedding_cost(token_count: int) -> float:
    """Custo estimado em USD (text-embedding-3-small: $0.02 / 1M tokens)."""
    return (token_count / 1_000_000) * COST_PER_MILLION_TOKENS


def estimate_tokens(text: str) -> int:
    """Aproximação: 1 token ≈ 4 caracteres em português."""
    return math.ceil(len(text) / 4)

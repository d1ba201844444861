"""
SERVIÇO DE ENRIQUECIMENTO DE IMÓVEIS
=====================================

Preenche campos faltantes dos imóveis importados a partir do texto livre
(título + descrição) usando gpt-4o-mini em JSON mode.

Funcionalidades:
- Extração estruturada com validação da saída da IA
- Fallback por regex no título
- Auto-enriquecimento de imóveis recém cadastrados
- Extração de bairro (re-enriquecimento)
- Relatório de qualidade dos dados
"""

import asyncio
import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from corretor.config import get_settings
from corretor.domain.entities import (
    Property,
    PropertyStatus,
    PropertyType,
    ListingType,
    FurnishedStatus,
    RESIDENTIAL_TYPES,
)
from corretor.domain.prompts.enrichment_prompts import (
    ENRICHMENT_SYSTEM_PROMPT,
    NEIGHBORHOOD_SYSTEM_PROMPT,
    build_enrichment_prompt,
    build_neighborhood_prompt,
)
from corretor.infrastructure.llm import LLMFactory

logger = logging.getLogger(__name__)
settings = get_settings()

# gpt-4o-mini: média entre input ($0.15/1M) e output ($0.60/1M)
COST_PER_MILLION_TOKENS = 0.4

VALID_PROPERTY_TYPES = [t.value for t in PropertyType]
VALID_LISTING_TYPES = [t.value for t in ListingType]
VALID_FURNISHED = [f.value for f in FurnishedStatus]

NUMERIC_FIELDS = [
    "bedrooms",
    "bathrooms",
    "suites",
    "parking_spaces",
    "price_monthly",
    "price_total",
    "condominium_fee",
    "iptu_monthly",
    "iptu_annual",
]

# Campos que a IA pode sobrescrever no imóvel
ENRICHABLE_FIELDS = NUMERIC_FIELDS + [
    "property_type",
    "listing_type",
    "address_neighborhood",
    "furnished",
    "features",
    "ai_summary",
]


@dataclass
class EnrichmentResult:
    success: bool
    property_id: Any
    enriched_data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    tokens_used: int = 0


@dataclass
class EnrichmentStats:
    total: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    total_tokens: int = 0
    estimated_cost: float = 0.0


@dataclass
class BatchEnrichmentOptions:
    """Opções do enriquecimento em lote (script enrich_properties)."""

    batch_size: int = 5
    delay_ms: int = 1000
    dry_run: bool = False
    force_reenrich: bool = False
    missing_type: bool = False
    missing_summary: bool = False
    limit: Optional[int] = None


@dataclass
class ValidationReport:
    total_properties: int = 0
    with_ai_summary: int = 0
    with_property_type: int = 0
    with_listing_type: int = 0
    with_bedrooms: int = 0
    with_bathrooms: int = 0
    with_neighborhood: int = 0
    with_features: int = 0
    completeness: Dict[str, int] = field(
        default_factory=lambda: {"full": 0, "partial": 0, "minimal": 0}
    )
    quality_score: int = 0


# =============================================================================
# ENRIQUECIMENTO VIA IA
# =============================================================================

async def enrich_property_with_ai(prop: Property) -> EnrichmentResult:
    """
    Extrai dados estruturados de um imóvel com a IA.

    Nunca levanta exceção: erros voltam em EnrichmentResult.error.
    """
    try:
        logger.info(f"🤖 Enriquecendo imóvel: {prop.id}")

        provider = LLMFactory.get_provider()
        response = await provider.chat_completion(
            messages=[
                {"role": "system", "content": ENRICHMENT_SYSTEM_PROMPT},
                {"role": "user", "content": build_enrichment_prompt(prop)},
            ],
            model=settings.openai_model,
            temperature=0,
            response_format={"type": "json_object"},
        )

        content = response.get("content")
        if not content:
            raise ValueError("Empty response from OpenAI")

        enriched = validate_enrichment_output(json.loads(content), prop)

        return EnrichmentResult(
            success=True,
            property_id=prop.id,
            enriched_data=enriched,
            tokens_used=response.get("tokens_used", 0),
        )
    except Exception as e:
        logger.error(f"❌ Falha ao enriquecer imóvel {prop.id}: {e}")
        return EnrichmentResult(success=False, property_id=prop.id, error=str(e))


def _to_number(value: Any) -> Optional[float]:
    """Converte para número; textos não numéricos e NaN viram None."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if isinstance(number, float):
        if math.isnan(number) or math.isinf(number):
            return None
        if number.is_integer():
            return int(number)
    return number


def validate_enrichment_output(data: Dict[str, Any], original: Any) -> Dict[str, Any]:
    """
    Limpa a resposta da IA antes de gravar.

    - features precisa ser lista (sem vazios, sem duplicados)
    - enums inválidos viram None
    - campos numéricos são convertidos ou anulados
    - ai_summary vazio ganha um resumo padrão
    """
    if not isinstance(data.get("features"), list):
        data["features"] = []

    if data.get("property_type") and data["property_type"] not in VALID_PROPERTY_TYPES:
        logger.warning(f"⚠️ property_type inválido: {data['property_type']}, usando None")
        data["property_type"] = None

    if data.get("listing_type") and data["listing_type"] not in VALID_LISTING_TYPES:
        logger.warning(f"⚠️ listing_type inválido: {data['listing_type']}, usando None")
        data["listing_type"] = None

    if data.get("furnished") and data["furnished"] not in VALID_FURNISHED:
        logger.warning(f"⚠️ furnished inválido: {data['furnished']}, usando None")
        data["furnished"] = None

    for field_name in NUMERIC_FIELDS:
        value = data.get(field_name)
        if value is None:
            continue
        number = _to_number(value)
        if number is None:
            logger.warning(f"⚠️ Número inválido em {field_name}: {value}, usando None")
        data[field_name] = number

    cleaned = [f for f in data["features"] if isinstance(f, str) and f.strip()]
    data["features"] = list(dict.fromkeys(cleaned))

    summary = data.get("ai_summary")
    if not isinstance(summary, str) or not summary.strip():
        title = getattr(original, "title", None) or "Imóvel"
        city = getattr(original, "address_city", None) or "localização não especificada"
        data["ai_summary"] = f"{title} em {city}"

    return data


# =============================================================================
# FALLBACK POR REGEX
# =============================================================================

_BEDROOMS_RE = re.compile(r"(\d+)\s*quarto", re.IGNORECASE)
_BATHROOMS_RE = re.compile(r"(\d+)\s*banheiro", re.IGNORECASE)
_PARKING_RE = re.compile(r"(\d+)\s*vaga", re.IGNORECASE)
_PRICE_RE = re.compile(r"R\$\s*([0-9.,]+)", re.IGNORECASE)

# Ordem importa: o primeiro grupo que casar define o tipo
_TYPE_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("apartamento", ("apartamento", "apto")),
    ("casa", ("casa",)),
    ("sobrado", ("sobrado",)),
    ("sala_comercial", ("sala", "comercial")),
    ("terreno", ("terreno", "lote")),
    ("fazenda_sitio_chacara", ("chácara", "sítio", "fazenda")),
    ("cobertura", ("cobertura",)),
    ("loft", ("loft",)),
]


def extract_basic_info_from_title(title: str) -> Dict[str, Any]:
    """Extrai quartos, banheiros, vagas, preço e tipo direto do título."""
    result: Dict[str, Any] = {"features": []}

    match = _BEDROOMS_RE.search(title)
    if match:
        result["bedrooms"] = int(match.group(1))

    match = _BATHROOMS_RE.search(title)
    if match:
        result["bathrooms"] = int(match.group(1))

    match = _PARKING_RE.search(title)
    if match:
        result["parking_spaces"] = int(match.group(1))

    lowered = title.lower()

    match = _PRICE_RE.search(title)
    if match:
        price_text = match.group(1).replace(".", "").replace(",", ".", 1)
        try:
            price: Optional[float] = float(price_text)
        except ValueError:
            price = None

        if "alugar" in lowered or "aluguel" in lowered:
            result["listing_type"] = ListingType.RENT.value
            result["price_monthly"] = price
        else:
            result["listing_type"] = ListingType.SALE.value
            result["price_total"] = price

    for property_type, keywords in _TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            result["property_type"] = property_type
            break

    return result


# =============================================================================
# AUTO-ENRIQUECIMENTO
# =============================================================================

def needs_enrichment(prop: Any) -> bool:
    """Sem resumo, tipo ou modalidade, ou residencial sem quartos."""
    if not prop.ai_summary:
        return True
    if not prop.property_type:
        return True
    if not prop.listing_type:
        return True

    if prop.property_type in RESIDENTIAL_TYPES and not prop.bedrooms:
        return True

    return False


def apply_enrichment(prop: Property, enriched_data: Dict[str, Any]) -> None:
    """Copia para o imóvel apenas os campos enriquecíveis."""
    for key, value in enriched_data.items():
        if key in ENRICHABLE_FIELDS:
            setattr(prop, key, value)


async def auto_enrich_property(db: AsyncSession, property_id: Any) -> bool:
    """
    Enriquece um imóvel recém cadastrado.

    Retorna True também quando o imóvel já está enriquecido.
    """
    try:
        result = await db.execute(select(Property).where(Property.id == property_id))
        prop = result.scalar_one_or_none()

        if not prop:
            logger.error(f"❌ Imóvel {property_id} não encontrado para enriquecimento")
            return False

        if not needs_enrichment(prop):
            logger.info(f"Imóvel {property_id} já enriquecido, pulando")
            return True

        logger.info(f"🤖 Auto-enriquecendo imóvel {property_id}")
        enrichment = await enrich_property_with_ai(prop)

        if not enrichment.success or not enrichment.enriched_data:
            logger.error(f"❌ Falha ao enriquecer imóvel {property_id}: {enrichment.error}")
            return False

        async with db.begin_nested():
            apply_enrichment(prop, enrichment.enriched_data)
            await db.flush()

        logger.info(f"✅ Imóvel {property_id} enriquecido")
        return True

    except Exception as e:
        logger.error(f"❌ Erro no auto-enriquecimento de {property_id}: {e}")
        return False


async def auto_enrich_properties(db: AsyncSession, property_ids: Sequence[Any]) -> Dict[str, List[Any]]:
    results: Dict[str, List[Any]] = {"succeeded": [], "failed": []}

    for property_id in property_ids:
        if await auto_enrich_property(db, property_id):
            results["succeeded"].append(property_id)
        else:
            results["failed"].append(property_id)

    return results


# =============================================================================
# ENRIQUECIMENTO EM LOTE
# =============================================================================

def build_enrichment_query(options: BatchEnrichmentOptions) -> Select:
    """Imóveis ativos a enriquecer (por padrão, os que não têm ai_summary)."""
    query = select(Property).where(
        Property.not_deleted(),
        Property.status == PropertyStatus.ACTIVE.value,
    )

    if not options.force_reenrich or options.missing_summary:
        query = query.where(Property.ai_summary.is_(None))

    if options.missing_type:
        query = query.where(Property.property_type.is_(None))

    if options.limit:
        query = query.limit(options.limit)

    return query


async def enrich_in_batches(
    db: AsyncSession,
    properties: Sequence[Property],
    options: BatchEnrichmentOptions,
    commit: bool = False,
) -> EnrichmentStats:
    """
    Processa os imóveis em lotes; cada lote roda em paralelo.

    Em dry run nada é gravado. Cada imóvel é salvo no seu próprio savepoint,
    então um registro rejeitado pelo banco não derruba os outros. Com
    commit=True cada imóvel salvo é commitado na hora.
    """
    stats = EnrichmentStats(total=len(properties))
    batch_size = options.batch_size or 5
    batches = [properties[i:i + batch_size] for i in range(0, len(properties), batch_size)]

    logger.info(f"🚀 Processando {len(properties)} imóveis em {len(batches)} lotes de {batch_size}")

    for index, batch in enumerate(batches):
        logger.info(f"📦 Lote {index + 1}/{len(batches)} ({len(batch)} imóveis)")

        results = await asyncio.gather(*(enrich_property_with_ai(p) for p in batch))
        by_id = {p.id: p for p in batch}

        for result in results:
            stats.processed += 1

            if not result.success or not result.enriched_data:
                stats.failed += 1
                logger.error(f"❌ {str(result.property_id)[:8]}... - {result.error}")
                continue

            stats.succeeded += 1
            stats.total_tokens += result.tokens_used
            logger.info(
                f"✅ {str(result.property_id)[:8]}... - "
                f"{result.enriched_data.get('property_type') or 'tipo desconhecido'}"
            )

            if options.dry_run:
                continue

            try:
                async with db.begin_nested():
                    apply_enrichment(by_id[result.property_id], result.enriched_data)
                    await db.flush()
                if commit:
                    await db.commit()
            except Exception as e:
                logger.error(f"❌ Falha ao salvar {result.property_id}: {e}")
                stats.failed += 1
                stats.succeeded -= 1

        if index < len(batches) - 1 and options.delay_ms:
            await asyncio.sleep(options.delay_ms / 1000)

    stats.estimated_cost = calculate_enrichment_cost(stats.total_tokens)
    return stats


def calculate_enrichment_cost(token_count: int) -> float:
    return (token_count / 1_000_000) * COST_PER_MILLION_TOKENS


# =============================================================================
# BAIRRO
# =============================================================================

async def extract_neighborhood(prop: Any) -> Dict[str, Optional[str]]:
    """
    Extrai só o bairro de um imóvel.

    Retorna {"neighborhood": str | None, "confidence": "high|medium|low"}.
    """
    try:
        provider = LLMFactory.get_provider()
        response = await provider.chat_completion(
            messages=[
                {"role": "system", "content": NEIGHBORHOOD_SYSTEM_PROMPT},
                {"role": "user", "content": build_neighborhood_prompt(prop)},
            ],
            model=settings.openai_model,
            temperature=0,
            response_format={"type": "json_object"},
        )

        content = response.get("content")
        if not content:
            raise ValueError("Empty response from OpenAI")

        data = json.loads(content)
        neighborhood = data.get("neighborhood")
        if isinstance(neighborhood, str):
            neighborhood = neighborhood.strip() or None

        return {"neighborhood": neighborhood, "confidence": data.get("confidence") or "low"}

    except Exception as e:
        logger.error(f"❌ Erro extraindo bairro de {prop.id}: {e}")
        return {"neighborhood": None, "confidence": "low"}


async def save_neighborhood(db: AsyncSession, property_id: Any, neighborhood: str) -> None:
    await db.execute(
        update(Property).where(Property.id == property_id).values(address_neighborhood=neighborhood)
    )


# =============================================================================
# QUALIDADE DOS DADOS
# =============================================================================

QUALITY_WEIGHTS = {
    "ai_summary": 0.25,
    "property_type": 0.20,
    "listing_type": 0.15,
    "bedrooms": 0.15,
    "neighborhood": 0.15,
    "features": 0.10,
}


def _completeness_percentage(prop: Any) -> float:
    """Críticos valem 3, importantes 2, desejáveis 1."""
    critical = [prop.ai_summary, prop.property_type, prop.listing_type]
    important = [prop.bedrooms, prop.bathrooms, prop.address_neighborhood]
    nice_to_have = [bool(prop.features), prop.parking_spaces, prop.condominium_fee]

    score = (
        sum(1 for v in critical if v) * 3
        + sum(1 for v in important if v) * 2
        + sum(1 for v in nice_to_have if v)
    )
    max_score = len(critical) * 3 + len(important) * 2 + len(nice_to_have)
    return score / max_score * 100


def generate_validation_report(properties: Sequence[Any]) -> ValidationReport:
    report = ValidationReport(total_properties=len(properties))

    for prop in properties:
        if prop.ai_summary:
            report.with_ai_summary += 1
        if prop.property_type:
            report.with_property_type += 1
        if prop.listing_type:
            report.with_listing_type += 1
        if prop.bedrooms:
            report.with_bedrooms += 1
        if prop.bathrooms:
            report.with_bathrooms += 1
        if prop.address_neighborhood:
            report.with_neighborhood += 1
        if isinstance(prop.features, list) and prop.features:
            report.with_features += 1

        percentage = _completeness_percentage(prop)
        if percentage >= 80:
            report.completeness["full"] += 1
        elif percentage >= 50:
            report.completeness["partial"] += 1
        else:
            report.completeness["minimal"] += 1

    total = report.total_properties
    if total:
        report.quality_score = math.floor(0.5 + (
            report.with_ai_summary / total * QUALITY_WEIGHTS["ai_summary"] * 100
            + report.with_property_type / total * QUALITY_WEIGHTS["property_type"] * 100
            + report.with_listing_type / total * QUALITY_WEIGHTS["listing_type"] * 100
            + report.with_bedrooms / total * QUALITY_WEIGHTS["bedrooms"] * 100
            + report.with_neighborhood / total * QUALITY_WEIGHTS["neighborhood"] * 100
            + report.with_features / total * QUALITY_WEIGHTS["features"] * 100
        ))

    return report

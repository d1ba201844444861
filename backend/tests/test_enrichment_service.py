"""
TESTES - ENRIQUECIMENTO DE IMÓVEIS
==================================

Validação da saída da IA, fallback por regex, auto-enriquecimento,
lote e relatório de qualidade.
"""

import json
from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import DataError, IntegrityError

from corretor.infrastructure.services.enrichment_service import (
    BatchEnrichmentOptions,
    auto_enrich_properties,
    auto_enrich_property,
    build_enrichment_query,
    enrich_in_batches,
    enrich_property_with_ai,
    extract_basic_info_from_title,
    extract_neighborhood,
    generate_validation_report,
    needs_enrichment,
    validate_enrichment_output,
)
from tests.conftest import TransactionalSession, make_result


def _llm_json(data) -> dict:
    return {"content": json.dumps(data), "tokens_used": 120, "tool_calls": None, "finish_reason": "stop"}


# =============================================================================
# VALIDAÇÃO DA SAÍDA DA IA
# =============================================================================

def test_invalid_enums_become_none():
    original = SimpleNamespace(title="Imóvel", address_city="Jundiaí")
    data = validate_enrichment_output(
        {"property_type": "mansao", "listing_type": "leasing", "furnished": "talvez", "ai_summary": "ok"},
        original,
    )

    assert data["property_type"] is None
    assert data["listing_type"] is None
    assert data["furnished"] is None


def test_features_are_cleaned_and_deduplicated():
    original = SimpleNamespace(title="Imóvel", address_city="Jundiaí")
    data = validate_enrichment_output(
        {"features": ["piscina", "", "  ", "piscina", 3, "churrasqueira"], "ai_summary": "ok"},
        original,
    )

    assert data["features"] == ["piscina", "churrasqueira"]


def test_features_not_list_becomes_empty():
    original = SimpleNamespace(title="Imóvel", address_city="Jundiaí")
    data = validate_enrichment_output({"features": "piscina", "ai_summary": "ok"}, original)

    assert data["features"] == []


def test_numeric_fields_are_converted():
    original = SimpleNamespace(title="Imóvel", address_city="Jundiaí")
    data = validate_enrichment_output(
        {"bedrooms": "3", "bathrooms": "dois", "price_total": 450000.0, "condominium_fee": "350.5", "ai_summary": "ok"},
        original,
    )

    assert data["bedrooms"] == 3
    assert data["bathrooms"] is None
    assert data["price_total"] == 450000
    assert data["condominium_fee"] == 350.5


def test_missing_summary_gets_fallback():
    data = validate_enrichment_output({}, SimpleNamespace(title="Casa térrea", address_city="Itupeva"))
    assert data["ai_summary"] == "Casa térrea em Itupeva"

    data = validate_enrichment_output({"ai_summary": "  "}, SimpleNamespace(title=None, address_city=None))
    assert data["ai_summary"] == "Imóvel em localização não especificada"


# =============================================================================
# FALLBACK POR REGEX
# =============================================================================

def test_extract_from_sale_title():
    info = extract_basic_info_from_title("Casa 3 quartos 2 banheiros 2 vagas R$ 450.000")

    assert info["bedrooms"] == 3
    assert info["bathrooms"] == 2
    assert info["parking_spaces"] == 2
    assert info["listing_type"] == "sale"
    assert info["price_total"] == 450000
    assert info["property_type"] == "casa"


def test_extract_from_rent_title():
    info = extract_basic_info_from_title("Apto para alugar no Centro R$ 2.500,00")

    assert info["listing_type"] == "rent"
    assert info["price_monthly"] == 2500
    assert info["property_type"] == "apartamento"
    assert "bedrooms" not in info


def test_extract_without_matches():
    assert extract_basic_info_from_title("Oportunidade única") == {"features": []}


# =============================================================================
# AUTO-ENRIQUECIMENTO
# =============================================================================

def test_needs_enrichment_rules(make_property):
    complete = make_property(ai_summary="Resumo", listing_type="rent")
    assert needs_enrichment(complete) is False

    assert needs_enrichment(make_property(ai_summary=None)) is True
    assert needs_enrichment(make_property(ai_summary="Resumo", property_type=None)) is True
    assert needs_enrichment(make_property(ai_summary="Resumo", bedrooms=None)) is True
    assert needs_enrichment(
        make_property(ai_summary="Resumo", property_type="terreno", bedrooms=None)
    ) is False


@pytest.mark.asyncio
async def test_enrich_property_with_ai_success(fake_llm, make_property):
    fake_llm.chat_completion.return_value = _llm_json(
        {"property_type": "apartamento", "listing_type": "rent", "bedrooms": 2, "ai_summary": "Apto central"}
    )

    result = await enrich_property_with_ai(make_property())

    assert result.success
    assert result.tokens_used == 120
    assert result.enriched_data["ai_summary"] == "Apto central"
    kwargs = fake_llm.chat_completion.call_args.kwargs
    assert kwargs["temperature"] == 0
    assert kwargs["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_enrich_property_with_ai_empty_response(fake_llm, make_property):
    fake_llm.chat_completion.return_value = {"content": "", "tokens_used": 0}

    result = await enrich_property_with_ai(make_property())

    assert not result.success
    assert result.error == "Empty response from OpenAI"


@pytest.mark.asyncio
async def test_auto_enrich_missing_property(db_session, fake_llm):
    db_session.execute.return_value = make_result(scalar=None)

    assert await auto_enrich_property(db_session, "nao-existe") is False
    fake_llm.chat_completion.assert_not_called()


@pytest.mark.asyncio
async def test_auto_enrich_skips_enriched_property(db_session, fake_llm, make_property):
    db_session.execute.return_value = make_result(scalar=make_property(ai_summary="Resumo"))

    assert await auto_enrich_property(db_session, "id") is True
    fake_llm.chat_completion.assert_not_called()


@pytest.mark.asyncio
async def test_auto_enrich_applies_data(db_session, fake_llm, make_property):
    prop = make_property(ai_summary=None)
    db_session.execute.return_value = make_result(scalar=prop)
    fake_llm.chat_completion.return_value = _llm_json(
        {"ai_summary": "Apartamento reformado", "features": ["varanda"], "title": "ignorado"}
    )

    assert await auto_enrich_property(db_session, prop.id) is True
    assert prop.ai_summary == "Apartamento reformado"
    assert prop.features == ["varanda"]
    assert prop.title == "Apartamento 2 quartos no Centro"
    db_session.flush.assert_awaited_once()


# =============================================================================
# LOTE
# =============================================================================

def test_enrichment_query_defaults_to_missing_summary():
    sql = str(build_enrichment_query(BatchEnrichmentOptions()).compile(dialect=postgresql.dialect()))

    assert "properties.ai_summary IS NULL" in sql
    assert "properties.deleted_at IS NULL" in sql
    assert "LIMIT" not in sql


def test_enrichment_query_force_and_missing_type():
    options = BatchEnrichmentOptions(force_reenrich=True, missing_type=True, limit=20)
    sql = str(build_enrichment_query(options).compile(dialect=postgresql.dialect()))

    assert "properties.ai_summary IS NULL" not in sql
    assert "properties.property_type IS NULL" in sql
    assert "LIMIT" in sql


@pytest.mark.asyncio
async def test_enrich_in_batches_dry_run(db_session, fake_llm, make_property):
    properties = [make_property(ai_summary=None) for _ in range(3)]
    fake_llm.chat_completion.return_value = _llm_json({"ai_summary": "Resumo gerado"})

    stats = await enrich_in_batches(
        db_session, properties, BatchEnrichmentOptions(batch_size=2, delay_ms=0, dry_run=True)
    )

    assert stats.total == 3
    assert stats.succeeded == 3
    assert stats.total_tokens == 360
    assert all(p.ai_summary is None for p in properties)
    db_session.flush.assert_not_called()


@pytest.mark.asyncio
async def test_enrich_in_batches_counts_failures(db_session, fake_llm, make_property):
    properties = [make_property(ai_summary=None), make_property(ai_summary=None)]
    fake_llm.chat_completion.side_effect = [_llm_json({"ai_summary": "Ok"}), {"content": None}]

    stats = await enrich_in_batches(db_session, properties, BatchEnrichmentOptions(delay_ms=0))

    assert stats.succeeded == 1
    assert stats.failed == 1
    assert properties[0].ai_summary == "Ok"


@pytest.mark.asyncio
async def test_auto_enrich_continues_after_rejected_write(fake_llm, make_property):
    first, second = make_property(ai_summary=None), make_property(ai_summary=None)
    session = TransactionalSession(
        results=[make_result(scalar=first), make_result(scalar=second)],
        flush_errors=[DataError("UPDATE properties", {}, Exception("numeric field overflow"))],
    )
    fake_llm.chat_completion.side_effect = [
        _llm_json({"ai_summary": "Cobertura duplex"}),
        _llm_json({"ai_summary": "Casa térrea"}),
    ]

    results = await auto_enrich_properties(session, [first.id, second.id])

    assert results == {"succeeded": [second.id], "failed": [first.id]}
    assert second.ai_summary == "Casa térrea"
    assert session.savepoint_rollbacks == 1
    assert session.pending_rollback is False


@pytest.mark.asyncio
async def test_enrich_in_batches_commits_each_saved_property(fake_llm, make_property):
    properties = [make_property(ai_summary=None) for _ in range(3)]
    session = TransactionalSession(
        flush_errors=[IntegrityError("UPDATE properties", {}, Exception("duplicate key value"))],
    )
    fake_llm.chat_completion.return_value = _llm_json({"ai_summary": "Resumo gerado"})

    stats = await enrich_in_batches(
        session, properties, BatchEnrichmentOptions(batch_size=3, delay_ms=0), commit=True
    )

    assert stats.succeeded == 2
    assert stats.failed == 1
    assert session.commits == 2
    assert session.savepoint_rollbacks == 1


# =============================================================================
# BAIRRO E QUALIDADE
# =============================================================================

@pytest.mark.asyncio
async def test_extract_neighborhood_strips_value(fake_llm, make_property):
    fake_llm.chat_completion.return_value = _llm_json({"neighborhood": "  Vila Arens ", "confidence": "high"})

    result = await extract_neighborhood(make_property())

    assert result == {"neighborhood": "Vila Arens", "confidence": "high"}


@pytest.mark.asyncio
async def test_extract_neighborhood_on_error(fake_llm, make_property):
    fake_llm.chat_completion.side_effect = RuntimeError("timeout")

    assert await extract_neighborhood(make_property()) == {"neighborhood": None, "confidence": "low"}


def test_validation_report(make_property):
    complete = make_property(
        ai_summary="Resumo", listing_type="rent", parking_spaces=1, condominium_fee=400,
    )
    empty = make_property(
        ai_summary=None, property_type=None, listing_type=None, bedrooms=None, bathrooms=None,
        address_neighborhood=None, features=[],
    )

    report = generate_validation_report([complete, empty])

    assert report.total_properties == 2
    assert report.with_ai_summary == 1
    assert report.completeness == {"full": 1, "partial": 0, "minimal": 1}
    assert report.quality_score == 50


def test_validation_report_empty():
    report = generate_validation_report([])

    assert report.total_properties == 0
    assert report.quality_score == 0

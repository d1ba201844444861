#!/usr/bin/env python3
"""
VALIDAÇÃO DO ENRIQUECIMENTO
===========================

Relatório de qualidade dos dados dos imóveis ativos.
Sai com código 1 quando o score fica abaixo de 50.

Uso:
    python -m corretor.scripts.validate_enrichment
"""

import asyncio
import sys

from sqlalchemy import select

from corretor.domain.entities import Property, PropertyStatus
from corretor.infrastructure.database import async_session
from corretor.infrastructure.logging_config import setup_logging
from corretor.infrastructure.services.enrichment_service import (
    ValidationReport,
    generate_validation_report,
)

MIN_ACCEPTABLE_SCORE = 50


def recommendation(score: int) -> str:
    if score >= 90:
        return "✅ Excelente qualidade! Pronto para produção."
    if score >= 70:
        return "⚠️  Boa qualidade, mas há melhorias a fazer."
    if score >= 50:
        return "⚠️  Qualidade moderada. Rode o enriquecimento."
    return "❌ Qualidade ruim. Enriquecimento altamente recomendado!"


def print_report(report: ValidationReport) -> None:
    total = report.total_properties

    def pct(count: int) -> str:
        return f"{count / total * 100:.1f}%" if total else "0.0%"

    print("=" * 60)
    print("📊 RELATÓRIO DE QUALIDADE DOS DADOS")
    print("=" * 60)
    print(f"\nImóveis ativos: {total}\n")

    print("PREENCHIMENTO DOS CAMPOS:")
    for label, count in (
        ("Resumo IA", report.with_ai_summary),
        ("Tipo", report.with_property_type),
        ("Finalidade", report.with_listing_type),
        ("Quartos", report.with_bedrooms),
        ("Banheiros", report.with_bathrooms),
        ("Bairro", report.with_neighborhood),
        ("Características", report.with_features),
    ):
        print(f"  {label + ':':<20} {count:>3} / {total} ({pct(count)})")

    print("\nDISTRIBUIÇÃO DE COMPLETUDE:")
    print(f"  Completo (80%+):     {report.completeness['full']:>3} imóveis")
    print(f"  Parcial (50-80%):    {report.completeness['partial']:>3} imóveis")
    print(f"  Mínimo (<50%):       {report.completeness['minimal']:>3} imóveis")

    print(f"\nSCORE GERAL: {report.quality_score}/100")

    print("\nRECOMENDAÇÕES:")
    print(f"  {recommendation(report.quality_score)}")

    if report.with_ai_summary < total:
        print(f"  - {total - report.with_ai_summary} imóveis sem resumo IA")
    if report.with_property_type < total:
        print(f"  - {total - report.with_property_type} imóveis sem tipo")
    if report.with_neighborhood < total:
        print(f"  - {total - report.with_neighborhood} imóveis sem bairro")

    print("\n" + "=" * 60 + "\n")


async def main() -> int:
    print("📊 Gerando relatório de qualidade...\n")

    try:
        async with async_session() as session:
            properties = (await session.execute(
                select(Property).where(
                    Property.not_deleted(),
                    Property.status == PropertyStatus.ACTIVE.value,
                )
            )).scalars().all()
    except Exception as e:
        print(f"❌ Erro: {e}")
        return 1

    report = generate_validation_report(properties)
    print_report(report)

    return 1 if report.quality_score < MIN_ACCEPTABLE_SCORE else 0


if __name__ == "__main__":
    setup_logging(json_format=False)
    sys.exit(asyncio.run(main()))

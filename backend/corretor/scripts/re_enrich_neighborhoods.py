#!/usr/bin/env python3
"""
REENRIQUECIMENTO DE BAIRROS
===========================

Extrai address_neighborhood dos imóveis ativos que ainda não têm bairro,
a partir de título, descrição, rua e CEP.

Uso:
    python -m corretor.scripts.re_enrich_neighborhoods [--dry-run] [--batch-size=50]
"""

import argparse
import asyncio
import sys
from typing import Dict, List

from sqlalchemy import select

from corretor.domain.entities import Property, PropertyStatus
from corretor.infrastructure.database import async_session
from corretor.infrastructure.logging_config import setup_logging
from corretor.infrastructure.services.enrichment_service import (
    extract_neighborhood,
    save_neighborhood,
)

ITEM_DELAY_SECONDS = 0.1
BATCH_DELAY_SECONDS = 2.0


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extrai bairros faltantes com IA")
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--batch-size", type=int, default=50)
    return parser.parse_args(argv)


def confidence_breakdown(results: List[Dict[str, str]]) -> Dict[str, int]:
    breakdown = {"high": 0, "medium": 0, "low": 0}
    for result in results:
        if result["confidence"] in breakdown:
            breakdown[result["confidence"]] += 1
    return breakdown


async def process_properties(args: argparse.Namespace) -> None:
    print("🔍 Buscando imóveis sem bairro...\n")

    async with async_session() as session:
        properties = (await session.execute(
            select(Property).where(
                Property.not_deleted(),
                Property.status == PropertyStatus.ACTIVE.value,
                Property.address_neighborhood.is_(None),
            )
        )).scalars().all()

        print(f"{len(properties)} imóveis sem bairro\n")

        if not properties:
            print("✅ Nenhum imóvel precisa de reenriquecimento!")
            return

        if args.dry_run:
            print("🔍 DRY RUN - nada será salvo\n")

        updated = skipped = failed = 0
        results: List[Dict[str, str]] = []
        batch_size = args.batch_size
        total_batches = (len(properties) + batch_size - 1) // batch_size

        for start in range(0, len(properties), batch_size):
            batch = properties[start:start + batch_size]
            print(f"\n📦 Lote {start // batch_size + 1}/{total_batches} ({len(batch)} imóveis)...")

            # Sequencial dentro do lote por causa do rate limit
            for prop in batch:
                # Lido antes de qualquer escrita: um savepoint desfeito expira o objeto
                prop_id = prop.id
                try:
                    result = await extract_neighborhood(prop)

                    if result["neighborhood"]:
                        if not args.dry_run:
                            async with session.begin_nested():
                                await save_neighborhood(session, prop_id, result["neighborhood"])
                            await session.commit()

                        print(f'  ✓ {prop_id}: "{result["neighborhood"]}" (confiança: {result["confidence"]})')
                        results.append({"id": str(prop_id), **result})
                        updated += 1
                    else:
                        print(f"  - {prop_id}: bairro não encontrado")
                        skipped += 1
                except Exception as e:
                    print(f"  ❌ Erro no imóvel {prop_id}: {e}")
                    failed += 1

                await asyncio.sleep(ITEM_DELAY_SECONDS)

            if start + batch_size < len(properties):
                print("  ⏸️  Pausa antes do próximo lote...")
                await asyncio.sleep(BATCH_DELAY_SECONDS)

    print("\n" + "=" * 60)
    print("📊 RESUMO DO REENRIQUECIMENTO")
    print("=" * 60)
    print(f"Total processado: {len(properties)}")
    print(f"✅ Atualizados: {updated}")
    print(f"⏭️  Pulados (sem bairro): {skipped}")
    print(f"❌ Falhas: {failed}")
    print()

    if results:
        breakdown = confidence_breakdown(results)
        print("CONFIANÇA:")
        for label, key in (("Alta", "high"), ("Média", "medium"), ("Baixa", "low")):
            print(f"  {label}: {breakdown[key]} ({breakdown[key] / len(results) * 100:.1f}%)")
        print()

    if args.dry_run:
        print("ℹ️  Dry run: rode sem --dry-run para salvar.")
    else:
        print("✅ Reenriquecimento concluído! Rode validate_enrichment para ver os números.")
    print("=" * 60 + "\n")


async def main(args: argparse.Namespace) -> int:
    print("🏘️  REENRIQUECIMENTO DE BAIRROS")
    print("=" * 60)
    print(f"Modo: {'DRY RUN' if args.dry_run else 'LIVE'}")
    print(f"Batch size: {args.batch_size}")
    print("=" * 60 + "\n")

    try:
        await process_properties(args)
        return 0
    except Exception as e:
        print(f"❌ Erro fatal: {e}")
        return 1


if __name__ == "__main__":
    setup_logging(json_format=False)
    sys.exit(asyncio.run(main(parse_args())))

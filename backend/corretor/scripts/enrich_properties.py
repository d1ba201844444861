#!/usr/bin/env python3
"""
ENRIQUECIMENTO DE IMÓVEIS EM LOTE
=================================

Usa o modelo de enriquecimento para preencher tipo, quartos, bairro,
resumo e destaques dos imóveis importados.

Uso:
    python -m corretor.scripts.enrich_properties --dry-run --limit=10
    python -m corretor.scripts.enrich_properties --batch-size=10 --delay=500

Opções:
    --dry-run          Não grava no banco
    --force            Reenriquece quem já tem ai_summary
    --limit=N          Processa só N imóveis
    --batch-size=N     Imóveis por lote (padrão 5)
    --delay=MS         Pausa entre lotes em ms (padrão 1000)
    --missing-type     Só imóveis sem property_type
    --missing-summary  Só imóveis sem ai_summary
"""

import argparse
import asyncio
import sys
import time

from corretor.infrastructure.database import async_session
from corretor.infrastructure.logging_config import setup_logging
from corretor.infrastructure.services.enrichment_service import (
    BatchEnrichmentOptions,
    build_enrichment_query,
    enrich_in_batches,
)


def parse_args(argv=None) -> BatchEnrichmentOptions:
    parser = argparse.ArgumentParser(description="Enriquece imóveis com IA")
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--force", action="store_true")
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--batch-size", type=int, default=5)
    parser.add_argument("--delay", type=int, default=1000)
    parser.add_argument("--missing-type", action="store_true")
    parser.add_argument("--missing-summary", action="store_true")
    args = parser.parse_args(argv)

    return BatchEnrichmentOptions(
        batch_size=args.batch_size,
        delay_ms=args.delay,
        dry_run=args.dry_run,
        force_reenrich=args.force,
        missing_type=args.missing_type,
        missing_summary=args.missing_summary,
        limit=args.limit,
    )


def _yes_no(value: bool) -> str:
    return "SIM" if value else "NÃO"


async def main(options: BatchEnrichmentOptions) -> int:
    print("=" * 60)
    print("🤖 ENRIQUECIMENTO DE IMÓVEIS COM IA")
    print("=" * 60)
    print(f"  Dry Run:           {_yes_no(options.dry_run)}")
    print(f"  Batch Size:        {options.batch_size}")
    print(f"  Delay:             {options.delay_ms}ms")
    print(f"  Reenriquecer:      {_yes_no(options.force_reenrich)}")
    print(f"  Sem tipo:          {_yes_no(options.missing_type)}")
    print(f"  Sem resumo:        {_yes_no(options.missing_summary)}")
    print(f"  Limite:            {options.limit or 'NENHUM'}")
    print("=" * 60 + "\n")

    started = time.monotonic()

    try:
        async with async_session() as session:
            properties = (await session.execute(build_enrichment_query(options))).scalars().all()

            if not properties:
                print("✅ Nenhum imóvel precisa de enriquecimento!")
                return 0

            print(f"📊 {len(properties)} imóveis para enriquecer\n")

            stats = await enrich_in_batches(session, properties, options, commit=not options.dry_run)

            if options.dry_run:
                await session.rollback()
    except Exception as e:
        print(f"❌ Erro fatal: {e}")
        return 1

    elapsed = time.monotonic() - started

    print("\n" + "=" * 60)
    print("📊 RESUMO DO ENRIQUECIMENTO")
    print("=" * 60)
    print(f"Total:        {stats.total}")
    print(f"Processados:  {stats.processed}")
    print(f"✅ Sucesso:   {stats.succeeded}")
    print(f"❌ Falhas:    {stats.failed}")
    print(f"🎯 Tokens:    {stats.total_tokens:,}")
    print(f"💰 Custo:     ${stats.estimated_cost:.4f} USD")
    print(f"⏱️  Tempo:     {elapsed:.1f}s")
    print("=" * 60)

    if options.dry_run:
        print("ℹ️  Dry run: rode sem --dry-run para salvar.")
    else:
        print("✅ Enriquecimento concluído! Rode validate_enrichment para ver os números.")

    return 0


if __name__ == "__main__":
    setup_logging(json_format=False)
    sys.exit(asyncio.run(main(parse_args())))

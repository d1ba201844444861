#!/usr/bin/env python3
"""
GERAÇÃO DE EMBEDDINGS
=====================

Gera embeddings de imóveis e/ou clientes.

Uso:
    python -m corretor.scripts.generate_embeddings
    python -m corretor.scripts.generate_embeddings --type=properties --limit=50
    python -m corretor.scripts.generate_embeddings --type=clients --dry-run

Opções:
    --type=properties|clients   Só um dos tipos (padrão: ambos)
    --limit=N                   Limita a quantidade
    --force                     Regera mesmo quem já tem embedding
    --dry-run                   Mostra estimativa e amostras, sem gravar
"""

import argparse
import asyncio
import sys
from typing import Callable, Sequence

from sqlalchemy import select

from corretor.domain.entities import Client, Property
from corretor.infrastructure.database import async_session
from corretor.infrastructure.logging_config import setup_logging
from corretor.infrastructure.services.embedding_service import (
    BatchEmbeddingStats,
    batch_generate_client_embeddings,
    batch_generate_property_embeddings,
    calculate_embedding_cost,
    client_preferences_to_text,
    estimate_tokens,
    property_to_text,
    save_client_embedding,
    save_property_embedding,
)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Gera embeddings de imóveis e clientes")
    parser.add_argument("--type", choices=["properties", "clients"], default=None)
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--force", action="store_true")
    parser.add_argument("--dry-run", action="store_true")
    return parser.parse_args(argv)


def print_progress(processed: int, total: int) -> None:
    sys.stdout.write(f"\r⏳ Progresso: {processed}/{total} ({round(processed / total * 100)}%)")
    sys.stdout.flush()


def print_stats(stats: BatchEmbeddingStats, label: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"📊 {label.upper()} - ESTATÍSTICAS FINAIS")
    print("=" * 60)
    print(f"Total:       {stats.total}")
    print(f"Processados: {stats.processed}")
    print(f"✅ Sucesso:  {stats.succeeded}")
    print(f"❌ Falhas:   {stats.failed}")
    print(f"⏭️  Pulados:  {stats.skipped}")
    print(f"🎯 Tokens:   {stats.total_tokens:,}")
    print(f"💰 Custo:    ${stats.estimated_cost:.4f} USD")
    print("=" * 60)


async def _process(
    session,
    items: Sequence,
    label: str,
    to_text: Callable,
    batch_fn: Callable,
    save_fn: Callable,
    args: argparse.Namespace,
) -> BatchEmbeddingStats:
    if not items:
        print(f"✅ Nenhum(a) {label} precisa de embedding")
        return BatchEmbeddingStats()

    print(f"📊 {len(items)} {label} para processar")

    estimated_tokens = sum(estimate_tokens(to_text(item)) for item in items)
    print(
        f"💰 Estimativa: {estimated_tokens:,} tokens, "
        f"${calculate_embedding_cost(estimated_tokens):.4f} USD\n"
    )

    if args.dry_run:
        print("🔍 DRY RUN - nenhum embedding será gerado ou salvo\n")
        for index, item in enumerate(items[:3], start=1):
            text = to_text(item)
            print(f"{index}. {getattr(item, 'title', None) or getattr(item, 'full_name', '')}")
            print(f"   Texto: {text[:150]}...")
            print(f"   Tokens estimados: {estimate_tokens(text)}")
            print()
        return BatchEmbeddingStats(total=len(items), skipped=len(items))

    stats = BatchEmbeddingStats(total=len(items))

    print("🚀 Gerando embeddings...\n")
    results = await batch_fn(items, print_progress)
    print("\n")

    for result in results:
        stats.processed += 1

        if not result.success:
            stats.failed += 1
            print(f"❌ Falha: {result.id} - {result.error}")
            continue

        try:
            await save_fn(session, result.id, result.embedding)
            await session.commit()
        except Exception as e:
            await session.rollback()
            stats.failed += 1
            print(f"❌ Falha ao salvar: {result.id} - {e}")
            continue

        stats.succeeded += 1
        stats.total_tokens += result.tokens_used

    stats.estimated_cost = calculate_embedding_cost(stats.total_tokens)
    return stats


async def generate_property_embeddings(session, args: argparse.Namespace) -> BatchEmbeddingStats:
    print("\n🏠 Gerando embeddings de imóveis...\n")

    query = select(Property).where(Property.not_deleted())
    if not args.force:
        query = query.where(Property.ai_embedding.is_(None))
    if args.limit:
        query = query.limit(args.limit)

    properties = (await session.execute(query)).scalars().all()
    return await _process(
        session, properties, "imóveis",
        property_to_text, batch_generate_property_embeddings, save_property_embedding, args,
    )


async def generate_client_embeddings(session, args: argparse.Namespace) -> BatchEmbeddingStats:
    print("\n👥 Gerando embeddings de clientes...\n")

    query = select(Client).where(Client.not_deleted())
    if not args.force:
        query = query.where(Client.preferences_embedding.is_(None))
    if args.limit:
        query = query.limit(args.limit)

    clients = (await session.execute(query)).scalars().all()
    return await _process(
        session, clients, "clientes",
        client_preferences_to_text, batch_generate_client_embeddings, save_client_embedding, args,
    )


async def main(args: argparse.Namespace) -> int:
    print("╔══════════════════════════════════════════════════════════╗")
    print("║          🤖 GERAÇÃO DE EMBEDDINGS                        ║")
    print("╚══════════════════════════════════════════════════════════╝")

    if args.dry_run:
        print("⚠️  DRY RUN - nenhuma alteração será feita")
    if args.force:
        print("⚠️  FORCE - embeddings existentes serão regerados")

    try:
        async with async_session() as session:
            if args.type == "properties":
                print_stats(await generate_property_embeddings(session, args), "Imóveis")
            elif args.type == "clients":
                print_stats(await generate_client_embeddings(session, args), "Clientes")
            else:
                property_stats = await generate_property_embeddings(session, args)
                client_stats = await generate_client_embeddings(session, args)

                print_stats(property_stats, "Imóveis")
                print_stats(client_stats, "Clientes")

                total_cost = property_stats.estimated_cost + client_stats.estimated_cost
                total_tokens = property_stats.total_tokens + client_stats.total_tokens
                print(f"\n💵 CUSTO TOTAL: ${total_cost:.4f} USD ({total_tokens:,} tokens)\n")

        print("✅ Concluído!\n")
        return 0
    except Exception as e:
        print(f"\n❌ Erro: {e}")
        return 1


if __name__ == "__main__":
    setup_logging(json_format=False)
    sys.exit(asyncio.run(main(parse_args())))

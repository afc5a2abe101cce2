#!/usr/bin/env python3
# run_pipeline.py - Main Pipeline Entry Point
# ============================================================================
# This script indexes documents into a Milvus collection:
# 1. Loads configuration from YAML (or falls back to defaults)
# 2. Extracts and chunks each document
# 3. Creates, keeps or clears the target collection
# 4. Embeds the chunks and upserts them as points
#
# Usage:
#   uv run run_pipeline.py                          # Documents from config.yaml
#   uv run run_pipeline.py paper.pdf                # Index a specific file
#   uv run run_pipeline.py paper.pdf 300 --debug    # Custom chunk size
#   uv run run_pipeline.py paper.pdf --collection papers --clear
# ============================================================================

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from shared_config import Config, DocumentConfig, config_from_env, find_config_path, load_config

console = Console()


def display_banner():
    """Displays the pipeline banner."""
    console.print(Panel.fit(
        "[bold]Indexing Pipeline[/bold]\n"
        "Document → chunks → embeddings → Milvus",
        title="📚 Document Indexer",
        border_style="cyan"
    ))


def display_config_summary(config: Config):
    """Displays a summary of the effective configuration."""
    table = Table(title="📋 Configuration Summary")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Milvus URI", config.milvus.uri)
    table.add_row("Collection", config.milvus.collection_name)
    table.add_row("Chunk size", str(config.chunking.chunk_size))
    table.add_row("Embedding model", f"{config.embedding.model} ({config.embedding.dim})")
    table.add_row("Batch width", str(config.upsert.batch_width))
    table.add_row("Point ids", config.upsert.id_strategy)
    table.add_row("Existing collection", config.pipeline.conflict_policy)
    table.add_row("Documents", str(len(config.documents)))

    console.print(table)
    console.print()


def resolve_config(args: argparse.Namespace) -> Config:
    """
    Loads config.yaml when one is available, otherwise environment
    variables, and applies CLI overrides.

    Raises:
        FileNotFoundError: If --config points to a missing file
    """
    if args.config and not Path(args.config).exists():
        raise FileNotFoundError(f"Config file not found: {args.config}")

    if find_config_path(args.config):
        config = load_config(args.config)
        console.print("[green]✓ Configuration loaded[/green]")
    else:
        config = config_from_env()
        console.print("[dim]No config.yaml found, using environment and defaults[/dim]")

    if args.collection is not None:
        config.milvus.collection_name = args.collection
    if args.chunk_size is not None:
        config.chunking.chunk_size = args.chunk_size
    if args.lenient_chunk_size:
        config.chunking.lenient_chunk_size = True
    if args.batch_width is not None:
        config.upsert.batch_width = args.batch_width
    if args.id_strategy is not None:
        config.upsert.id_strategy = args.id_strategy
    if args.policy is not None:
        config.pipeline.conflict_policy = args.policy
    if args.no_auto_provision:
        config.pipeline.allow_auto_provision = False
    if args.debug:
        config.pipeline.debug = True
    if args.path:
        config.documents = [DocumentConfig(path=args.path)]

    return config


def run_pipeline(config: Config) -> int:
    """
    Indexes every configured document.

    A failed document does not stop the others. With the "clear" policy
    only the first document clears the collection; later ones add to it.

    Returns:
        Process exit code (0 when every document was indexed)
    """
    from docindex.milvus import (
        ConflictPolicy,
        EmbeddingBatchClient,
        IngestError,
        MilvusStore,
        describe_failure,
        index_document,
    )

    display_config_summary(config)

    if not config.milvus.collection_name:
        console.print("[red]✗ Collection name cannot be empty[/red]")
        return 1

    if not config.documents:
        console.print("[red]✗ No documents given and none configured in config.yaml[/red]")
        return 1

    store = MilvusStore(
        uri=config.milvus.uri,
        connect_attempts=config.milvus.connect_attempts,
    )
    embedder = EmbeddingBatchClient(config.embedding.model)
    policy = ConflictPolicy.parse(config.pipeline.conflict_policy)
    failures = 0

    for i, doc in enumerate(config.documents, 1):
        console.print(f"\n[cyan]Processing document {i}/{len(config.documents)}[/cyan]")

        try:
            report = index_document(
                doc.path,
                collection_name=config.milvus.collection_name,
                chunk_size=config.chunking.chunk_size,
                lenient_chunk_size=config.chunking.lenient_chunk_size,
                store=store,
                embedder=embedder,
                vector_size=config.embedding.dim,
                distance_metric=config.milvus.distance_metric,
                conflict_policy=policy if i == 1 else ConflictPolicy.KEEP,
                allow_auto_provision=config.pipeline.allow_auto_provision,
                batch_width=config.upsert.batch_width,
                id_strategy=config.upsert.id_strategy,
                debug=config.pipeline.debug,
            )
        except IngestError as e:
            console.print(f"[red]✗ Failed to index {doc.filename}[/red]")
            console.print(f"[red]  {describe_failure(e)}[/red]")
            failures += 1
            continue

        console.print(
            f"[green]✓ {report.file_name}: {report.chunks_created} chunks, "
            f"{report.vectors_produced} vectors, {report.points_acknowledged} points[/green]"
        )

    if failures:
        console.print(Panel.fit(
            f"[bold red]{failures} of {len(config.documents)} documents failed[/bold red]",
            title="❌ Done",
            border_style="red"
        ))
        return 1

    console.print(Panel.fit(
        "[bold green]Pipeline completed![/bold green]",
        title="✅ Done",
        border_style="green"
    ))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Document Indexer - chunk, embed and upsert documents into Milvus"
    )
    parser.add_argument("path", nargs="?", help="Path to a PDF (or .txt/.md) file to index")
    parser.add_argument("chunk_size", nargs="?", help="Maximum tokens per chunk")
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to config.yaml file"
    )
    parser.add_argument("--collection", type=str, default=None, help="Target collection name")
    policy = parser.add_mutually_exclusive_group()
    policy.add_argument(
        "--clear",
        dest="policy",
        action="store_const",
        const="clear",
        help="Drop and recreate the collection if it already exists"
    )
    policy.add_argument(
        "--keep",
        dest="policy",
        action="store_const",
        const="keep",
        help="Add to an existing collection (default)"
    )
    parser.add_argument(
        "--no-auto-provision",
        action="store_true",
        help="Fail instead of creating a missing collection"
    )
    parser.add_argument("--batch-width", type=int, default=None, help="Points per upsert batch")
    parser.add_argument(
        "--id-strategy",
        choices=["random", "deterministic"],
        default=None,
        help="How point ids are generated"
    )
    parser.add_argument(
        "--lenient-chunk-size",
        action="store_true",
        help="Fall back to a default instead of failing on a non-numeric chunk size"
    )
    parser.add_argument("--debug", action="store_true", help="Print extracted text, chunks and embeddings")
    return parser


def main(argv=None) -> int:
    """Entry point with CLI argument parsing."""
    args = build_parser().parse_args(argv)
    load_dotenv(Path.cwd() / ".env")

    display_banner()

    try:
        config = resolve_config(args)
    except FileNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        return 1

    return run_pipeline(config)


if __name__ == "__main__":
    sys.exit(main())

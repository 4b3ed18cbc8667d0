"""Command-line interface for the portfolio assistant."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Must load dotenv before importing settings
from dotenv import load_dotenv  # noqa: E402
load_dotenv()

from .config import settings  # noqa: E402
from .db import AsyncSessionLocal, KnowledgeStore, async_engine, init_schema  # noqa: E402
from .embeddings.embedder import Embedder  # noqa: E402
from .ingestion.pipeline import IngestionError, IngestionPipeline  # noqa: E402
from .retrieval.retriever import Retriever  # noqa: E402
from .routing.intent import Intent, classify_intent  # noqa: E402

logger = logging.getLogger("portfolio.cli")

DEFAULT_SEARCH_QUERY = "Is {first_name} interested in Product Manager roles?"
PREVIEW_CHARS = 240


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------
# ingest
# ---------------------------------------------------------------------

async def _ingest(directory: Path, dry_run: bool, reset: bool) -> None:
    if dry_run:
        pipeline = IngestionPipeline()
        await pipeline.ingest_directory(directory, dry_run=True, reset=reset)
        return

    try:
        async with AsyncSessionLocal() as session:
            pipeline = IngestionPipeline(embedder=Embedder(), store=KnowledgeStore(session))
            await pipeline.ingest_directory(directory, dry_run=False, reset=reset)
    finally:
        await async_engine.dispose()


def cmd_ingest(args) -> int:
    """Chunk, embed and store the knowledge directory."""
    directory = Path(args.dir) if args.dir else settings.knowledge_dir
    try:
        asyncio.run(_ingest(directory, dry_run=args.dry_run, reset=args.reset))
    except IngestionError as exc:
        logger.error("%s", exc)
        return 1
    except Exception:
        logger.exception("Fatal error")
        return 1

    logger.info("Ingestion finished.")
    return 0


# ---------------------------------------------------------------------
# search
# ---------------------------------------------------------------------

async def _search(query: str, count: int, intent_name: str | None):
    try:
        async with AsyncSessionLocal() as session:
            store = KnowledgeStore(session)
            embedder = Embedder()

            if intent_name is None:
                query_embedding = await embedder.embed_one(query)
                return None, await store.match_documents(query_embedding, match_count=count)

            intent = classify_intent(query) if intent_name == "auto" else Intent(intent_name)
            rows = await Retriever(embedder, store).retrieve(query, intent, match_count=count)
            return intent, rows
    finally:
        await async_engine.dispose()


def cmd_search(args) -> int:
    """Test retrieval from the command line."""
    query = " ".join(args.query).strip() or DEFAULT_SEARCH_QUERY.format(
        first_name=settings.owner_name.split()[0]
    )

    try:
        intent, rows = asyncio.run(_search(query, args.count, args.intent))
    except Exception:
        logger.exception("Search failed")
        return 1

    print(f"\n Query: {query}")
    if intent is not None:
        print(f" Intent: {intent.value}")

    if not rows:
        print(" No results returned. (Did ingestion run? Does the documents table have rows?)")
        return 0

    print("\n Top matches:\n")
    for i, row in enumerate(rows, 1):
        title = row.section_title or "(no title)"
        src = row.source_file or "(no file)"
        dtype = row.doc_type or "(no type)"
        sim = f"{row.similarity:.3f}" if row.similarity is not None else "n/a"

        preview = " ".join(row.content[:PREVIEW_CHARS].split())
        if len(row.content) > PREVIEW_CHARS:
            preview += "…"

        print(f"{i}. [{dtype}] {src} — {title} (similarity: {sim})")
        print(f"   {preview}")
        print()

    return 0


# ---------------------------------------------------------------------
# init-db / serve
# ---------------------------------------------------------------------

async def _init_db() -> None:
    try:
        await init_schema()
    finally:
        await async_engine.dispose()


def cmd_init_db(args) -> int:
    """Create the pgvector extension and the documents table."""
    try:
        asyncio.run(_init_db())
    except Exception:
        logger.exception("Schema initialization failed")
        return 1

    logger.info("Database schema ready (embedding dim %d).", settings.embedding_dim)
    return 0


def cmd_serve(args) -> int:
    """Start the API server."""
    import uvicorn

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("Starting server on %s:%d", host, port)

    uvicorn.run(
        "portfolio_assistant.main:app",
        host=host,
        port=port,
        reload=args.reload,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio-assistant",
        description="Knowledge ingestion and chat assistant for the portfolio site",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ingest command
    ingest_parser = subparsers.add_parser("ingest", help="Ingest the knowledge directory")
    ingest_parser.add_argument("--dir", "-d", help="Knowledge directory (defaults to KNOWLEDGE_DIR)")
    ingest_parser.add_argument("--dry-run", action="store_true", help="Chunk and log only, no DB writes")
    ingest_parser.add_argument("--reset", action="store_true", help="Delete each file's rows before inserting")
    ingest_parser.set_defaults(func=cmd_ingest)

    # search command
    search_parser = subparsers.add_parser("search", help="Test retrieval from the CLI")
    search_parser.add_argument("query", nargs="*", help="Search query")
    search_parser.add_argument("--count", "-k", type=int, default=8, help="Number of matches")
    search_parser.add_argument(
        "--intent",
        choices=["auto"] + [i.value for i in Intent],
        help="Route through intent filtering, dedupe and capping",
    )
    search_parser.set_defaults(func=cmd_search)

    # init-db command
    init_parser = subparsers.add_parser("init-db", help="Create extension and tables")
    init_parser.set_defaults(func=cmd_init_db)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", type=str, help="Host to bind to")
    serve_parser.add_argument("--port", type=int, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv=None):
    """Main CLI entrypoint."""
    _configure_logging()
    args = build_parser().parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()

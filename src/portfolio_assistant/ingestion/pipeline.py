"""
Knowledge Ingestion Pipeline

One-shot batch job that loads every markdown file of the knowledge
directory into the knowledge store:

1. Infer the file's doc type and priority from its name
2. Chunk the markdown
3. Optionally delete the file's existing rows (reset mode)
4. Embed each chunk and insert it

Files are processed in sorted filename order and chunks in chunk order.
Any embedding or insert failure aborts the whole run. Every row is committed
as soon as it is inserted, so rows written before the failure are kept;
re-running with reset is the recovery path.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from ..config import settings
from ..db.vector_store import KnowledgeStore
from ..embeddings.embedder import Embedder
from ..knowledge.chunker import MarkdownChunker
from ..knowledge.doc_types import infer_doc_type, priority_for
from ..knowledge.models import Chunk, ChunkMetadata

logger = logging.getLogger("portfolio.ingest")


class IngestionError(RuntimeError):
    """Raised when an ingestion run cannot continue."""


@dataclass
class FileReport:
    """Outcome of ingesting one knowledge file."""

    source_file: str
    doc_type: str
    priority: float
    chunk_count: int
    inserted: int = 0
    deleted: int = 0


@dataclass
class IngestReport:
    """Outcome of a full ingestion run."""

    dry_run: bool
    reset: bool
    files: List[FileReport] = field(default_factory=list)

    @property
    def total_chunks(self) -> int:
        return sum(f.chunk_count for f in self.files)

    @property
    def total_inserted(self) -> int:
        return sum(f.inserted for f in self.files)


def list_knowledge_files(directory: Path) -> List[Path]:
    """
    Return the ``*.md`` files of ``directory`` sorted by filename.

    Raises
    ------
    IngestionError
        If the directory does not exist or holds no markdown files.
    """
    if not directory.is_dir():
        raise IngestionError(f"Missing knowledge folder: {directory}")

    files = sorted(
        (p for p in directory.iterdir() if p.is_file() and p.name.lower().endswith(".md")),
        key=lambda p: p.name,
    )
    if not files:
        raise IngestionError(f"No .md files found in {directory}")

    return files


class IngestionPipeline:
    """
    Chunk, embed and store knowledge files.

    The embedder and store are injected so the pipeline can run against
    test doubles. Both may be omitted for dry runs.
    """

    def __init__(
        self,
        embedder: Optional[Embedder] = None,
        store: Optional[KnowledgeStore] = None,
        chunker: Optional[MarkdownChunker] = None,
        delay_seconds: Optional[float] = None,
        projects_source_file: Optional[str] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.chunker = chunker or MarkdownChunker()
        self.delay_seconds = (
            settings.ingest_delay_seconds if delay_seconds is None else delay_seconds
        )
        self.projects_source_file = (projects_source_file or settings.projects_source_file).lower()
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest_directory(
        self,
        directory: Path,
        dry_run: bool = False,
        reset: bool = False,
    ) -> IngestReport:
        """
        Ingest every markdown file in ``directory``.

        Parameters
        ----------
        directory : Path
            Knowledge folder.
        dry_run : bool
            Chunk and log only; nothing is embedded or written.
        reset : bool
            Delete each file's existing rows before inserting its chunks.

        Returns
        -------
        IngestReport
            Per-file chunk and row counts.
        """
        files = list_knowledge_files(directory)

        logger.info("Found %d knowledge files in %s", len(files), directory)
        logger.info("Mode: %s", "DRY RUN (no DB writes)" if dry_run else "LIVE INSERT")
        logger.info("Reset per file: %s", "YES" if reset else "NO")

        if not dry_run and (self.embedder is None or self.store is None):
            raise IngestionError("Live ingestion requires an embedder and a knowledge store.")

        report = IngestReport(dry_run=dry_run, reset=reset)
        for path in files:
            file_report = await self.ingest_file(
                path.name,
                path.read_text(encoding="utf-8"),
                dry_run=dry_run,
                reset=reset,
            )
            report.files.append(file_report)

        logger.info(
            "Ingestion complete: %d files, %d chunks, %d rows inserted",
            len(report.files),
            report.total_chunks,
            report.total_inserted,
        )
        return report

    async def ingest_file(
        self,
        source_file: str,
        markdown: str,
        dry_run: bool = False,
        reset: bool = False,
    ) -> FileReport:
        """
        Ingest a single document identified by ``source_file``.
        """
        doc_type = infer_doc_type(source_file)
        priority = priority_for(doc_type)
        chunks = self.chunker.chunk(markdown)

        report = FileReport(
            source_file=source_file,
            doc_type=doc_type.value,
            priority=priority,
            chunk_count=len(chunks),
        )
        logger.info(
            "-> %s (%s, priority %s) => %d chunks",
            source_file,
            doc_type.value,
            priority,
            len(chunks),
        )

        if dry_run:
            for chunk in chunks:
                logger.info(
                    "  [dry-run] chunk %d/%d: %s",
                    chunk.chunk_index + 1,
                    chunk.total_chunks,
                    chunk.section_title or "(no title)",
                )
            return report

        if reset:
            try:
                report.deleted = await self.store.delete_source(source_file)
                await self.store.commit()
            except Exception as exc:
                raise IngestionError(
                    f"Failed to reset existing rows for {source_file}: {exc}"
                ) from exc
            logger.info("  Reset %d existing rows for %s", report.deleted, source_file)

        for chunk in chunks:
            content = chunk.content.strip()
            if not content:
                continue

            try:
                embedding = await self.embedder.embed_one(content)
                await self.store.add_chunk(
                    content=content,
                    embedding=embedding,
                    source_file=source_file,
                    section_title=chunk.section_title,
                    doc_type=doc_type.value,
                    priority=priority,
                    metadata=self.build_metadata(source_file, chunk),
                )
                await self.store.commit()
            except Exception as exc:
                raise IngestionError(
                    f"Ingestion failed for {source_file} chunk {chunk.chunk_index}: {exc}"
                ) from exc

            report.inserted += 1
            if self.delay_seconds > 0:
                await self._sleep(self.delay_seconds)

        logger.info("  Finished %s", source_file)
        return report

    def build_metadata(self, source_file: str, chunk: Chunk) -> ChunkMetadata:
        """
        Chunk position, plus the project name for sections of the projects file.
        """
        project = None
        if source_file.lower() == self.projects_source_file and chunk.parent_title:
            project = chunk.parent_title

        return ChunkMetadata(
            chunk_index=chunk.chunk_index,
            total_chunks=chunk.total_chunks,
            project=project,
        )

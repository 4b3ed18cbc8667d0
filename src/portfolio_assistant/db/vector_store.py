"""
Knowledge Store

PostgreSQL + pgvector backed storage and similarity search for knowledge
chunks. The search surface mirrors the two lookups the chat layer needs:

- match_documents: unfiltered nearest-neighbour search
- match_documents_filtered: search restricted to a doc_type allow-list

Results are ordered by cosine distance (most similar first).
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from .models import KnowledgeChunk
from ..config import settings
from ..knowledge.models import ChunkMetadata, StoredChunk


class KnowledgeStoreError(RuntimeError):
    """Raised when a row cannot be written to the knowledge store."""


class KnowledgeStore:
    """
    Knowledge chunk storage bound to one async database session.
    """

    def __init__(self, session: AsyncSession, dimensions: Optional[int] = None) -> None:
        """
        Initialize with an async database session.

        Parameters
        ----------
        session : AsyncSession
            SQLAlchemy async session for database operations.
        dimensions : Optional[int]
            Vector length of the embedding column. Defaults to settings.embedding_dim.
        """
        self._session = session
        self.dimensions = dimensions or settings.embedding_dim

    async def commit(self) -> None:
        """
        Commit the current transaction.
        """
        await self._session.commit()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add_chunk(
        self,
        content: str,
        embedding: List[float],
        source_file: str,
        section_title: Optional[str],
        doc_type: str,
        priority: float,
        metadata: ChunkMetadata,
        url: Optional[str] = None,
    ) -> str:
        """
        Insert a single chunk row and return its identifier.

        Raises
        ------
        KnowledgeStoreError
            If the embedding length differs from the column dimensionality.
        """
        if len(embedding) != self.dimensions:
            raise KnowledgeStoreError(
                f"Embedding has {len(embedding)} dimensions, store expects {self.dimensions}."
            )

        record = KnowledgeChunk(
            content=content,
            embedding=embedding,
            source_file=source_file,
            section_title=section_title,
            url=url,
            doc_type=doc_type,
            priority=priority,
            metadata_=metadata.model_dump(exclude_none=True),
        )
        self._session.add(record)
        await self._session.flush()
        return str(record.id)

    async def delete_source(self, source_file: str) -> int:
        """
        Remove all rows ingested from ``source_file``.

        Returns the number of deleted rows.
        """
        stmt = delete(KnowledgeChunk).where(KnowledgeChunk.source_file == source_file)
        result = await self._session.execute(stmt)
        return result.rowcount

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def count_source(self, source_file: str) -> int:
        stmt = select(func.count()).select_from(KnowledgeChunk).where(
            KnowledgeChunk.source_file == source_file
        )
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    async def match_documents(
        self,
        query_embedding: List[float],
        match_count: int = 10,
    ) -> List[StoredChunk]:
        """
        Nearest-neighbour search over all chunks.
        """
        return await self._match(query_embedding, match_count)

    async def match_documents_filtered(
        self,
        query_embedding: List[float],
        filter_doc_types: Sequence[str],
        match_count: int = 10,
    ) -> List[StoredChunk]:
        """
        Nearest-neighbour search restricted to the given doc types.
        """
        return await self._match(query_embedding, match_count, list(filter_doc_types))

    async def get_stats(self) -> dict:
        """
        Return row counts overall, per source file and per doc type.
        """
        total_stmt = select(func.count()).select_from(KnowledgeChunk)
        total_result = await self._session.execute(total_stmt)
        total_chunks = total_result.scalar() or 0

        by_source_stmt = (
            select(KnowledgeChunk.source_file, func.count())
            .group_by(KnowledgeChunk.source_file)
            .order_by(KnowledgeChunk.source_file)
        )
        by_source = await self._session.execute(by_source_stmt)

        by_type_stmt = (
            select(KnowledgeChunk.doc_type, func.count())
            .group_by(KnowledgeChunk.doc_type)
            .order_by(KnowledgeChunk.doc_type)
        )
        by_type = await self._session.execute(by_type_stmt)

        return {
            "total_chunks": total_chunks,
            "chunks_by_source": {row[0] or "unknown": row[1] for row in by_source.all()},
            "chunks_by_doc_type": {row[0] or "unknown": row[1] for row in by_type.all()},
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _match(
        self,
        query_embedding: List[float],
        match_count: int,
        doc_types: Optional[List[str]] = None,
    ) -> List[StoredChunk]:
        # pgvector's <=> operator
        cosine_distance = KnowledgeChunk.embedding.cosine_distance(query_embedding)

        stmt = (
            select(
                KnowledgeChunk,
                (1 - cosine_distance).label("similarity"),
            )
            .order_by(cosine_distance)
            .limit(match_count)
        )

        if doc_types:
            stmt = stmt.where(KnowledgeChunk.doc_type.in_(doc_types))

        result = await self._session.execute(stmt)
        return [self._to_stored(row[0], row[1]) for row in result.all()]

    @staticmethod
    def _to_stored(record: KnowledgeChunk, similarity: Optional[float]) -> StoredChunk:
        similarity = float(similarity) if similarity is not None else None
        rank_score = None
        if similarity is not None and record.priority is not None:
            rank_score = similarity * record.priority

        return StoredChunk(
            id=str(record.id),
            content=record.content,
            source_file=record.source_file,
            section_title=record.section_title,
            url=record.url,
            doc_type=record.doc_type,
            priority=record.priority,
            metadata=ChunkMetadata(**record.metadata_) if record.metadata_ else None,
            similarity=similarity,
            rank_score=rank_score,
        )

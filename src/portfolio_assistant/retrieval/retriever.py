"""
Retrieval Orchestrator

Turns a question and its intent into the ordered context chunks handed to
the answer composer.

Responsibilities
----------------
- Embed the question
- Query the knowledge store, restricted to the intent's doc types
- Drop near-duplicate rows
- Cap the result at the intent's chunk budget

Errors from the embedder or the store propagate unchanged; there is no
partial-result fallback.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..config import settings
from ..db.vector_store import KnowledgeStore
from ..embeddings.embedder import Embedder
from ..knowledge.models import StoredChunk
from ..routing.intent import Intent, doc_types_for_intent, max_chunks_for_intent

logger = logging.getLogger("portfolio.retrieval")

DEDUPE_PREFIX_CHARS = 80


def dedupe_key(chunk: StoredChunk) -> str:
    """
    Identity used for de-duplication: source, section and content prefix.
    """
    return "::".join((
        chunk.source_file or "?",
        chunk.section_title or "?",
        chunk.content[:DEDUPE_PREFIX_CHARS],
    ))


def dedupe_and_cap(chunks: Iterable[StoredChunk], limit: int) -> List[StoredChunk]:
    """
    Keep the first occurrence of each dedupe key, up to ``limit`` chunks.

    Input order is preserved, so with similarity-sorted input the most
    similar survivors are kept.
    """
    seen = set()
    kept: List[StoredChunk] = []
    for chunk in chunks:
        if len(kept) >= limit:
            break
        key = dedupe_key(chunk)
        if key in seen:
            continue
        seen.add(key)
        kept.append(chunk)
    return kept


class Retriever:
    """
    Intent-aware retrieval over the knowledge store.
    """

    def __init__(self, embedder: Embedder, store: KnowledgeStore) -> None:
        self.embedder = embedder
        self.store = store

    async def retrieve(
        self,
        question: str,
        intent: Intent,
        match_count: Optional[int] = None,
    ) -> List[StoredChunk]:
        """
        Retrieve context chunks for ``question``.

        Parameters
        ----------
        question : str
            Visitor question, used verbatim as the embedding input.
        intent : Intent
            Routing intent selecting the doc-type filter and chunk cap.
        match_count : Optional[int]
            Candidates requested from the store. Defaults to
            settings.retrieval_match_count.

        Returns
        -------
        List[StoredChunk]
            De-duplicated chunks, most similar first, at most
            ``max_chunks_for_intent(intent)`` long.
        """
        match_count = match_count or settings.retrieval_match_count
        query_embedding = await self.embedder.embed_one(question)

        allowed = doc_types_for_intent(intent)
        if allowed:
            rows = await self.store.match_documents_filtered(
                query_embedding,
                filter_doc_types=allowed,
                match_count=match_count,
            )
        else:
            rows = await self.store.match_documents(
                query_embedding,
                match_count=match_count,
            )

        chunks = dedupe_and_cap(rows, max_chunks_for_intent(intent))
        logger.debug(
            "Retrieved %d/%d chunks (intent=%s, filter=%s)",
            len(chunks),
            len(rows),
            intent.value,
            allowed,
        )
        return chunks

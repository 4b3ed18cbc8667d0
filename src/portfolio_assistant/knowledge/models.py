"""
Knowledge Data Models

This module defines the canonical records that flow through the knowledge
pipeline:

- Chunk: a self-contained passage cut from a markdown document
- ChunkMetadata: the structured metadata stored alongside each chunk
- StoredChunk: a row returned by the knowledge store's similarity search

Each Chunk corresponds to ONE embedding vector once ingested.
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class Chunk(BaseModel):
    """
    A single retrievable passage of a knowledge document.

    The content already embeds its heading (and the enclosing level-2
    heading for level-3/4 sections), so it reads correctly in isolation.
    """

    content: str = Field(
        ...,
        min_length=1,
        description="Chunk text, prefixed with reconstructed heading context.",
    )

    section_title: Optional[str] = Field(
        default=None,
        description="Nearest heading label, suffixed with '(part N)' when sub-split.",
    )

    parent_title: Optional[str] = Field(
        default=None,
        description="Enclosing level-2 heading for level-3/4 sections.",
    )

    chunk_index: int = Field(..., ge=0)
    total_chunks: int = Field(..., ge=1)

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )


class ChunkMetadata(BaseModel):
    """
    Metadata persisted in the store's JSON column.

    ``project`` is only set for chunks of the projects file that sit under
    a level-2 project heading.
    """

    chunk_index: int = Field(..., ge=0)
    total_chunks: int = Field(..., ge=1)
    project: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class StoredChunk(BaseModel):
    """
    A knowledge store row as returned by similarity search.
    """

    id: str
    content: str
    source_file: Optional[str] = None
    section_title: Optional[str] = None
    url: Optional[str] = None
    doc_type: Optional[str] = None
    priority: Optional[float] = None
    metadata: Optional[ChunkMetadata] = None
    similarity: Optional[float] = None
    rank_score: Optional[float] = None

    model_config = ConfigDict(extra="ignore", frozen=True)

"""
SQLAlchemy Models

Defines the database schema for the knowledge store: one row per ingested
chunk, with its pgvector embedding and retrieval metadata.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Column,
    String,
    Float,
    Text,
    DateTime,
    Index,
    func,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from pgvector.sqlalchemy import Vector

from ..config import settings


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ---------------------------------------------------------------------
# Knowledge Chunk Model
# ---------------------------------------------------------------------

class KnowledgeChunk(Base):
    """
    A chunk of a knowledge document with its embedding.

    ``source_file`` is the natural key for replacing a document's rows on
    re-ingestion.
    """
    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    source_file: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    section_title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    doc_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    priority: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    metadata_: Mapped[Optional[dict]] = mapped_column(
        "metadata",
        JSONB,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    # Dimension must match the configured embedding model
    embedding = Column(Vector(settings.embedding_dim), nullable=False)

    __table_args__ = (
        Index("idx_documents_source_file", "source_file"),
        Index("idx_documents_doc_type", "doc_type"),
    )

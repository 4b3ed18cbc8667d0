"""
Knowledge Package

Markdown chunking, document categories and the records shared by the
ingestion and retrieval layers.
"""

from .chunker import MarkdownChunker, chunk_markdown
from .doc_types import DocType, PRIORITY_BY_TYPE, infer_doc_type, priority_for
from .models import Chunk, ChunkMetadata, StoredChunk

__all__ = [
    "MarkdownChunker",
    "chunk_markdown",
    "DocType",
    "PRIORITY_BY_TYPE",
    "infer_doc_type",
    "priority_for",
    "Chunk",
    "ChunkMetadata",
    "StoredChunk",
]

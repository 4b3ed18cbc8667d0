"""
Database Package

Provides SQLAlchemy async session management and model definitions
for PostgreSQL with pgvector.
"""

from .session import get_async_session, async_engine, AsyncSessionLocal, init_schema
from .models import Base, KnowledgeChunk
from .vector_store import KnowledgeStore, KnowledgeStoreError

__all__ = [
    "get_async_session",
    "async_engine",
    "AsyncSessionLocal",
    "init_schema",
    "Base",
    "KnowledgeChunk",
    "KnowledgeStore",
    "KnowledgeStoreError",
]

"""
Knowledge Routes

Read-only view of what the ingestion pipeline has loaded into the
knowledge store.
"""

from fastapi import APIRouter, Depends
from typing import Annotated

from .models import KnowledgeStatsResponse
from .dependencies import get_knowledge_store
from ..db import KnowledgeStore

router = APIRouter(prefix="/api/knowledge", tags=["knowledge"])


@router.get(
    "/stats",
    response_model=KnowledgeStatsResponse,
    summary="Get knowledge store statistics",
)
async def get_knowledge_stats(
    store: Annotated[KnowledgeStore, Depends(get_knowledge_store)],
) -> KnowledgeStatsResponse:
    """
    Return chunk counts overall, per source file and per doc type.
    """
    # Global exception handler captures failures
    return KnowledgeStatsResponse(**await store.get_stats())

"""
API Models for the Portfolio Assistant

This module defines the Pydantic models used for request/response
validation on the chat and knowledge endpoints.
"""

from __future__ import annotations

from typing import Any, List, Optional, Dict, Literal
from pydantic import BaseModel, Field, ConfigDict, field_validator

from ..knowledge.models import ChunkMetadata


# ---------------------------------------------------------------------
# Chat Models
# ---------------------------------------------------------------------

class ChatMessage(BaseModel):
    """
    Single prior turn of the conversation, as sent by the site client.
    """
    role: Literal["user", "assistant"]
    content: str

    model_config = ConfigDict(extra="ignore")


class ChatRequest(BaseModel):
    """
    Chat request payload.

    Both fields are lenient so that a malformed request still reaches the
    route: a non-string ``message`` is treated as missing (400), a
    non-list ``history`` as empty, and unusable history turns are dropped.
    """
    message: Optional[str] = None
    history: Optional[List[ChatMessage]] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("message", mode="before")
    @classmethod
    def coerce_message(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    @field_validator("history", mode="before")
    @classmethod
    def coerce_history(cls, v: Any) -> List[ChatMessage]:
        if not isinstance(v, list):
            return []

        return [
            ChatMessage.model_validate(item)
            for item in v
            if isinstance(item, dict)
            and item.get("role") in ("user", "assistant")
            and isinstance(item.get("content"), str)
        ]


class SourceCitation(BaseModel):
    """
    A knowledge chunk the reply was grounded on.
    """
    source_file: Optional[str] = None
    section_title: Optional[str] = None
    doc_type: Optional[str] = None
    similarity: Optional[float] = None
    rank_score: Optional[float] = None
    metadata: Optional[ChunkMetadata] = None

    model_config = ConfigDict(extra="forbid")


class ChatResponse(BaseModel):
    """
    Chat response payload.
    """
    reply: str
    sources: List[SourceCitation] = Field(default_factory=list)
    intent: str

    model_config = ConfigDict(extra="forbid")


class ErrorResponse(BaseModel):
    error: str


# ---------------------------------------------------------------------
# Knowledge Store Models
# ---------------------------------------------------------------------

class KnowledgeStatsResponse(BaseModel):
    """
    Row counts of the knowledge store.
    """
    total_chunks: int = Field(..., ge=0)
    chunks_by_source: Dict[str, int] = Field(default_factory=dict)
    chunks_by_doc_type: Dict[str, int] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

from .intent import (
    Intent,
    classify_intent,
    doc_types_for_intent,
    max_chunks_for_intent,
)

__all__ = [
    "Intent",
    "classify_intent",
    "doc_types_for_intent",
    "max_chunks_for_intent",
]

"""
Intent Routing

Maps a visitor question to a coarse intent by case-insensitive substring
matching, and maps each intent to the doc types retrieval is restricted to
and the number of context chunks passed to the model.

Keyword groups overlap (e.g. "role" vs. "what roles"); the first matching
rule in INTENT_RULES wins.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..knowledge.doc_types import DocType


class Intent(str, Enum):
    AVAILABILITY = "availability"
    TOOLS = "tools"
    PROJECT_ROLE = "project_role"
    EDUCATION = "education"
    DEFAULT = "default"


INTENT_RULES: List[Tuple[Intent, Tuple[str, ...]]] = [
    # Availability / logistics
    (Intent.AVAILABILITY, (
        "relocation",
        "relocate",
        "remote",
        "location",
        "based",
        "visa",
        "work authorization",
        "where are you",
        "where is she",
    )),
    # Career interest / roles being sought
    (Intent.AVAILABILITY, (
        "what kinds of roles",
        "what roles",
        "looking for",
        "interested in",
        "open to",
        "what positions",
        "what job",
        "what type of role",
    )),
    # Education / schooling
    (Intent.EDUCATION, (
        "school",
        "education",
        "degree",
        "berkeley",
        "uc berkeley",
        "university of florida",
        "gpa",
        "masters",
        "master's",
        "bachelor",
        "b.s.",
        "mids",
        "graduated",
        "studied",
    )),
    # Tech stack / tools
    (Intent.TOOLS, (
        "tools",
        "tech stack",
        "stack",
        "built with",
        "framework",
        "database",
        "model",
        "vector",
        "supabase",
        "next.js",
        "react",
        "openai",
        "embedding",
    )),
    # Role / contribution on a project
    (Intent.PROJECT_ROLE, (
        "what did",
        "what was",
        "role",
        "contribution",
        "worked on",
        "responsible for",
        "involved in",
    )),
]


DOC_TYPES_BY_INTENT: Dict[Intent, List[DocType]] = {
    Intent.AVAILABILITY: [DocType.CONTACT, DocType.FAQ],
    Intent.TOOLS: [DocType.PROJECTS, DocType.EXPERIENCE, DocType.SKILLS],
    Intent.PROJECT_ROLE: [DocType.PROJECTS, DocType.EXPERIENCE],
    Intent.EDUCATION: [DocType.ABOUT, DocType.EXPERIENCE],
}


MAX_CHUNKS_BY_INTENT: Dict[Intent, int] = {
    Intent.AVAILABILITY: 3,
    Intent.TOOLS: 5,
}
DEFAULT_MAX_CHUNKS = 6


def classify_intent(question: str) -> Intent:
    """
    Return the intent of the first rule with a keyword contained in the
    lowercased question, or ``Intent.DEFAULT``.
    """
    text = question.lower()
    for intent, keywords in INTENT_RULES:
        if any(keyword in text for keyword in keywords):
            return intent
    return Intent.DEFAULT


def doc_types_for_intent(intent: Intent) -> Optional[List[str]]:
    """
    Doc type allow-list for ``intent``; None means unfiltered retrieval.
    """
    doc_types = DOC_TYPES_BY_INTENT.get(intent)
    if doc_types is None:
        return None
    return [d.value for d in doc_types]


def max_chunks_for_intent(intent: Intent) -> int:
    return MAX_CHUNKS_BY_INTENT.get(intent, DEFAULT_MAX_CHUNKS)

"""
Knowledge Document Categories

Every knowledge file belongs to exactly one DocType. The category is inferred
from the filename and carries a fixed priority weight that is stored with
each chunk as auxiliary ranking metadata.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple


class DocType(str, Enum):
    PROJECTS = "projects"
    EXPERIENCE = "experience"
    FAQ = "faq"
    ABOUT = "about"
    SKILLS = "skills"
    CONTACT = "contact"
    BOT_IDENTITY = "bot_identity"
    OTHER = "other"


# Skills and contact are kept below projects so they do not crowd out
# project detail when used for ranking.
PRIORITY_BY_TYPE: Dict[DocType, float] = {
    DocType.PROJECTS: 1.0,
    DocType.EXPERIENCE: 0.9,
    DocType.FAQ: 0.85,
    DocType.ABOUT: 0.7,
    DocType.SKILLS: 0.4,
    DocType.CONTACT: 0.3,
    DocType.BOT_IDENTITY: 0.2,
    DocType.OTHER: 0.5,
}


# Evaluated top to bottom; the first row with a keyword contained in the
# lowercased file stem wins.
FILENAME_RULES: List[Tuple[DocType, Tuple[str, ...]]] = [
    (DocType.PROJECTS, ("project",)),
    (DocType.EXPERIENCE, ("experience",)),
    (DocType.FAQ, ("faq",)),
    (DocType.ABOUT, ("about",)),
    (DocType.SKILLS, ("skill",)),
    (DocType.CONTACT, ("contact",)),
    (DocType.BOT_IDENTITY, ("bot_identity", "bot-identity")),
]


def infer_doc_type(filename: str) -> DocType:
    """Map a knowledge filename such as ``projects.md`` to its DocType."""
    base = filename.lower()
    if base.endswith(".md"):
        base = base[: -len(".md")]

    for doc_type, keywords in FILENAME_RULES:
        if any(keyword in base for keyword in keywords):
            return doc_type

    return DocType.OTHER


def priority_for(doc_type: DocType) -> float:
    return PRIORITY_BY_TYPE.get(doc_type, PRIORITY_BY_TYPE[DocType.OTHER])

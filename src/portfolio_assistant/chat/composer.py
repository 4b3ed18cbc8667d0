"""
Answer Composer

Builds the chat-completion request for one visitor message and returns the
model's reply together with the sources it was given.

Flow
----
1. Classify the question's intent
2. Retrieve context chunks for that intent
3. Render the chunks as labelled context blocks
4. Send system prompt + recent history + question/context to the model
5. Return reply, source citations and intent

Nothing is cached or persisted; every call is an independent round trip.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..api.models import ChatMessage, ChatResponse, SourceCitation
from ..config import settings
from ..knowledge.models import StoredChunk
from ..llm.client import LLMClient
from ..prompts import USER_TURN_TEMPLATE, build_system_prompt
from ..retrieval.retriever import Retriever
from ..routing.intent import classify_intent

logger = logging.getLogger("portfolio.chat")


# ---------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------

def format_context(chunks: Sequence[StoredChunk]) -> str:
    """
    Render chunks as numbered, labelled context blocks.
    """
    blocks = []
    for i, chunk in enumerate(chunks, start=1):
        header_parts = [
            f"[{chunk.doc_type}]" if chunk.doc_type else "[doc]",
            chunk.source_file or "unknown_source",
        ]
        if chunk.section_title:
            header_parts.append(f"— {chunk.section_title}")
        header = " ".join(header_parts)
        blocks.append(f"### Context {i}: {header}\n{chunk.content}")
    return "\n\n".join(blocks)


def recent_history(
    history: Optional[Sequence[ChatMessage]],
    window: int,
) -> List[Dict[str, str]]:
    """Last ``window`` turns as plain dicts for LLM input."""
    if not history or window <= 0:
        return []
    return [{"role": m.role, "content": m.content} for m in history[-window:]]


def build_sources(chunks: Sequence[StoredChunk]) -> List[SourceCitation]:
    return [
        SourceCitation(
            source_file=c.source_file,
            section_title=c.section_title,
            doc_type=c.doc_type,
            similarity=c.similarity,
            rank_score=c.rank_score,
            metadata=c.metadata,
        )
        for c in chunks
    ]


# ---------------------------------------------------------------------
# Composer
# ---------------------------------------------------------------------

class AnswerComposer:
    """
    Answers visitor questions from retrieved knowledge.
    """

    def __init__(
        self,
        retriever: Retriever,
        llm: LLMClient,
        system_prompt: Optional[str] = None,
        history_window: Optional[int] = None,
        match_count: Optional[int] = None,
    ) -> None:
        self.retriever = retriever
        self.llm = llm
        self.system_prompt = system_prompt or build_system_prompt(
            settings.owner_name, settings.owner_pronouns
        )
        self.history_window = (
            settings.history_window if history_window is None else history_window
        )
        self.match_count = match_count or settings.retrieval_match_count

    async def answer(
        self,
        message: str,
        history: Optional[Sequence[ChatMessage]] = None,
    ) -> ChatResponse:
        """
        Produce a reply for ``message``.

        Parameters
        ----------
        message : str
            The visitor's question, already trimmed and non-empty.
        history : Optional[Sequence[ChatMessage]]
            Prior turns; only the most recent ``history_window`` are sent.

        Returns
        -------
        ChatResponse
            Reply text, one citation per context chunk, and the intent.
        """
        intent = classify_intent(message)
        chunks = await self.retriever.retrieve(message, intent, self.match_count)

        messages = recent_history(history, self.history_window)
        messages.append({
            "role": "user",
            "content": USER_TURN_TEMPLATE.format(
                question=message,
                context=format_context(chunks),
            ),
        })

        response_msg = await self.llm.chat(self.system_prompt, messages)
        reply = (response_msg.get("content") or "").strip()

        logger.info(
            "Answered question (intent=%s, chunks=%d, reply_chars=%d)",
            intent.value,
            len(chunks),
            len(reply),
        )

        return ChatResponse(
            reply=reply,
            sources=build_sources(chunks),
            intent=intent.value,
        )

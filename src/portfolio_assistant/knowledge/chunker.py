"""
Heading-Aware Markdown Chunker

Splits knowledge documents into self-contained passages along ``##`` /
``###`` / ``####`` heading boundaries.

Key Properties
--------------
- Each chunk carries its heading text inside the content; level-3/4 chunks
  are additionally prefixed with their enclosing level-2 heading.
- Sections longer than ``max_chars`` are re-split on blank-line paragraph
  boundaries, with room left for the heading on every part. A paragraph is
  never cut, so a single paragraph above the budget becomes its own
  (oversized) chunk.
- ``max_chars`` is a hard limit for everything else: a paragraph that fits
  alone but not under its heading is emitted without the heading.
- Chunk indices are contiguous over the whole document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from langchain_text_splitters import RecursiveCharacterTextSplitter

from .models import Chunk
from ..config import settings


HEADING_PATTERN = re.compile(r"^(#{2,4})\s+(.+?)\s*$")
LINE_SPLIT_PATTERN = re.compile(r"\r?\n")


@dataclass
class _Section:
    title: Optional[str]
    level: int
    parent_title: Optional[str]
    body: List[str] = field(default_factory=list)

    def has_content(self) -> bool:
        return self.title is not None or bool("\n".join(self.body).strip())

    def heading_block(self) -> str:
        """
        Heading lines that make the section readable out of context.
        """
        if not self.title:
            return ""
        if self.level == 2:
            return f"## {self.title}"
        if self.parent_title:
            return f"## {self.parent_title}\n{'#' * self.level} {self.title}"
        return f"{'#' * self.level} {self.title}"


@dataclass
class _Piece:
    title: Optional[str]
    text: str
    parent_title: Optional[str]


class MarkdownChunker:
    """
    Split markdown into Chunk records.

    The chunker is stateless between calls and safe to reuse.
    """

    def __init__(self, max_chars: Optional[int] = None) -> None:
        self.max_chars = max_chars or settings.chunk_max_chars

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, markdown: str) -> List[Chunk]:
        """
        Chunk a markdown document.

        Parameters
        ----------
        markdown : str
            Raw markdown text of one knowledge document.

        Returns
        -------
        List[Chunk]
            Chunks in document order with contiguous ``chunk_index`` values.
            Empty or whitespace-only input yields an empty list.
        """
        pieces: List[_Piece] = []
        for section in self._split_sections(markdown):
            pieces.extend(self._section_pieces(section))

        total = len(pieces)
        return [
            Chunk(
                content=piece.text,
                section_title=piece.title,
                parent_title=piece.parent_title,
                chunk_index=index,
                total_chunks=total,
            )
            for index, piece in enumerate(pieces)
        ]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _split_sections(markdown: str) -> List[_Section]:
        sections: List[_Section] = []
        current = _Section(title=None, level=0, parent_title=None)
        parent_h2: Optional[str] = None

        for line in LINE_SPLIT_PATTERN.split(markdown):
            match = HEADING_PATTERN.match(line)
            if not match:
                current.body.append(line)
                continue

            level = len(match.group(1))
            title = match.group(2).strip()

            if current.has_content():
                sections.append(current)

            if level == 2:
                parent_h2 = title
                current = _Section(title=title, level=level, parent_title=None)
            else:
                current = _Section(title=title, level=level, parent_title=parent_h2)

        if current.has_content():
            sections.append(current)

        return sections

    def _section_pieces(self, section: _Section) -> List[_Piece]:
        heading = section.heading_block()
        body = "\n".join(section.body).strip()
        full = f"{heading}\n{body}".strip() if heading else body

        if not full:
            return []

        if len(full) <= self.max_chars:
            return [_Piece(section.title, full, section.parent_title)]

        parts = [self._compose(heading, split) for split in self._split_body(heading, body)]
        if not parts:
            parts = [full]
        return [
            _Piece(
                f"{section.title} (part {number})" if section.title else f"part {number}",
                text,
                section.parent_title,
            )
            for number, text in enumerate(parts, start=1)
        ]

    def _split_body(self, heading: str, body: str) -> List[str]:
        """
        Pack the section body into paragraph groups that fit next to the heading.
        """
        budget = self.max_chars - len(heading) - 1 if heading else self.max_chars
        splitter = RecursiveCharacterTextSplitter(
            separators=["\n\n"],
            chunk_size=max(budget, 1),
            chunk_overlap=0,
            keep_separator=False,
            length_function=len,
        )
        splits = (split.strip() for split in splitter.split_text(body))
        return [split for split in splits if split]

    def _compose(self, heading: str, split: str) -> str:
        # A paragraph that fits the budget alone but not under the heading
        # is emitted bare; oversized paragraphs keep the heading.
        if not heading:
            return split
        if len(heading) + 1 + len(split) > self.max_chars and len(split) <= self.max_chars:
            return split
        return f"{heading}\n{split}"


def chunk_markdown(markdown: str, max_chars: Optional[int] = None) -> List[Chunk]:
    """Chunk ``markdown`` with a one-off MarkdownChunker."""
    return MarkdownChunker(max_chars=max_chars).chunk(markdown)

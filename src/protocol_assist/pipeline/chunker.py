"""Sentence-aligned chunking of protocol text.

A sentence ends at ``.``, ``!`` or ``?`` followed by whitespace; the
punctuation stays with its sentence and chunks are exact substrings of the
source, so whitespace inside a chunk is preserved. Sentences are packed
greedily up to the budget. A sentence longer than the budget becomes its own
chunk and is never truncated.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from protocol_assist.models import ProtocolChunk

log = logging.getLogger(__name__)

MAX_CHUNK_SIZE = 4000

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` spans of the non-blank sentences in *text*."""
    spans: list[tuple[int, int]] = []
    start = 0
    for match in _SENTENCE_BOUNDARY.finditer(text):
        spans.append((start, match.start()))
        start = match.end()
    spans.append((start, len(text)))

    trimmed: list[tuple[int, int]] = []
    for s, e in spans:
        segment = text[s:e]
        stripped = segment.strip()
        if not stripped:
            continue
        lead = len(segment) - len(segment.lstrip())
        trimmed.append((s + lead, s + lead + len(stripped)))
    return trimmed


class ProtocolChunker:
    """Split protocol text into ordered, bounded-size chunks.

    Args:
        max_size: Budget per chunk, in characters or in tokens when
            ``counter`` is given.
        counter: Optional measure (e.g. a ``TokenCounter``) applied to the
            candidate chunk text. Defaults to ``len``.
    """

    def __init__(
        self,
        max_size: int = MAX_CHUNK_SIZE,
        counter: Optional[Callable[[str], int]] = None,
    ) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self._measure = counter or len

    def chunk(self, text: str) -> list[ProtocolChunk]:
        if not text or not text.strip():
            return []

        spans: list[tuple[int, int]] = []
        chunk_start: int | None = None
        chunk_end = 0

        for sent_start, sent_end in split_sentences(text):
            if chunk_start is None:
                chunk_start, chunk_end = sent_start, sent_end
                continue
            if self._measure(text[chunk_start:sent_end]) > self.max_size:
                spans.append((chunk_start, chunk_end))
                chunk_start, chunk_end = sent_start, sent_end
            else:
                chunk_end = sent_end

        if chunk_start is not None:
            spans.append((chunk_start, chunk_end))

        chunks = [
            ProtocolChunk(index=i, text=text[s:e], start=s, end=e)
            for i, (s, e) in enumerate(spans)
        ]
        oversized = sum(1 for c in chunks if self._measure(c.text) > self.max_size)
        log.debug(
            "Chunked %d chars into %d chunk(s) (%d oversized)",
            len(text), len(chunks), oversized,
        )
        return chunks


def chunk_text(text: str, max_size: int = MAX_CHUNK_SIZE) -> list[str]:
    """Convenience wrapper returning only the chunk strings."""
    return [c.text for c in ProtocolChunker(max_size).chunk(text)]

"""Batch scheduler: bounded fan-out / fan-in over chunk analyses.

Each batch of up to ``batch_size`` chunks is dispatched concurrently and
awaited as a whole before the next batch starts, so at most ``batch_size``
requests are in flight. Outcomes come back in chunk order as an explicit
success/failure union; :func:`collect_analyses` turns any failure into a
:class:`~protocol_assist.exceptions.BatchFailure`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Union

from protocol_assist.exceptions import BatchFailure
from protocol_assist.models import ProtocolChunk
from protocol_assist.pipeline.analyzer import ChunkAnalyzer
from protocol_assist.pipeline.payloads import ChunkAnalysis

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkSuccess:
    chunk: ProtocolChunk
    analysis: ChunkAnalysis


@dataclass(frozen=True)
class ChunkFailure:
    chunk: ProtocolChunk
    error: Exception


ChunkOutcome = Union[ChunkSuccess, ChunkFailure]


class BatchScheduler:
    """Runs chunk analyses in sequential batches of concurrent calls."""

    def __init__(self, analyzer: ChunkAnalyzer, *, batch_size: int = 3) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self._analyzer = analyzer
        self._batch_size = batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    async def run(
        self,
        chunks: list[ProtocolChunk],
        study_context: dict[str, Any],
    ) -> list[ChunkOutcome]:
        """Analyze *chunks* batch by batch.

        Stops dispatching after the first batch that contains a failure; the
        returned outcomes then cover only the chunks that were attempted.
        Cancellation is never recorded as a failure; it propagates.
        """
        outcomes: list[ChunkOutcome] = []

        for start in range(0, len(chunks), self._batch_size):
            batch = chunks[start : start + self._batch_size]
            settled = await asyncio.gather(
                *(self._analyzer.analyze(chunk, study_context) for chunk in batch),
                return_exceptions=True,
            )

            batch_failed = False
            for chunk, result in zip(batch, settled):
                if isinstance(result, BaseException):
                    if not isinstance(result, Exception):
                        raise result
                    log.warning("%s analysis failed: %s", chunk.name, result)
                    outcomes.append(ChunkFailure(chunk=chunk, error=result))
                    batch_failed = True
                else:
                    outcomes.append(ChunkSuccess(chunk=chunk, analysis=result))

            log.info(
                "Batch %d/%d settled (%d chunk(s))",
                start // self._batch_size + 1,
                -(-len(chunks) // self._batch_size),
                len(batch),
            )
            if batch_failed:
                break

        return outcomes


def collect_analyses(outcomes: list[ChunkOutcome], total_chunks: int) -> list[ChunkAnalysis]:
    """Return all analyses in order, or raise BatchFailure if any chunk failed."""
    failures = [o for o in outcomes if isinstance(o, ChunkFailure)]
    if failures:
        raise BatchFailure(failures, total_chunks) from failures[0].error
    if len(outcomes) != total_chunks:
        raise ValueError(f"Expected {total_chunks} outcomes, got {len(outcomes)}")
    return [o.analysis for o in outcomes if isinstance(o, ChunkSuccess)]

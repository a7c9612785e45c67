"""Protocol analysis and document generation pipeline."""

from __future__ import annotations

from protocol_assist.pipeline.aggregator import ResultAggregator
from protocol_assist.pipeline.analyzer import ChunkAnalyzer
from protocol_assist.pipeline.batching import (
    BatchScheduler,
    ChunkFailure,
    ChunkOutcome,
    ChunkSuccess,
    collect_analyses,
)
from protocol_assist.pipeline.chunker import ProtocolChunker, chunk_text
from protocol_assist.pipeline.generator import DocumentGenerator
from protocol_assist.pipeline.metrics import (
    CarryForwardFallback,
    FixedFallback,
    MetricFallbackPolicy,
    RandomRangeFallback,
    create_fallback_policy,
)

__all__ = [
    "BatchScheduler",
    "CarryForwardFallback",
    "ChunkAnalyzer",
    "ChunkFailure",
    "ChunkOutcome",
    "ChunkSuccess",
    "DocumentGenerator",
    "FixedFallback",
    "MetricFallbackPolicy",
    "ProtocolChunker",
    "RandomRangeFallback",
    "ResultAggregator",
    "chunk_text",
    "collect_analyses",
    "create_fallback_policy",
]

"""Fallback policies for metrics the model leaves out of a chunk analysis.

A missing score must not read as a hard zero, so the aggregator asks an
explicit policy for a placeholder. Three policies are provided:

* :class:`FixedFallback` (default): a constant per metric.
* :class:`RandomRangeFallback`: uniform draw in a per-metric range
  (complexity 0.2–0.9, completeness 0.3–0.9, efficiency 0.4–0.8); seedable.
* :class:`CarryForwardFallback`: the last value seen for that metric in an
  earlier chunk, else the fixed default.
"""

from __future__ import annotations

import random
from typing import Optional, Protocol, runtime_checkable

from protocol_assist.core.config import AnalysisConfig

METRIC_RANGES: dict[str, tuple[float, float]] = {
    "complexity": (0.2, 0.9),
    "completeness": (0.3, 0.9),
    "efficiency": (0.4, 0.8),
}

DEFAULT_METRICS: dict[str, float] = {
    name: round((low + high) / 2, 2) for name, (low, high) in METRIC_RANGES.items()
}


def clamp_unit(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


@runtime_checkable
class MetricFallbackPolicy(Protocol):
    """Supplies a value for a metric missing from one chunk's output."""

    def fill(self, metric: str, previous: Optional[float]) -> float:
        """Return the placeholder for *metric*.

        Args:
            metric: Metric name (``complexity``, ``completeness``, ``efficiency``).
            previous: Last value seen for this metric in an earlier chunk.
        """
        ...


class FixedFallback:
    """Constant placeholder per metric."""

    def __init__(self, defaults: dict[str, float] | None = None) -> None:
        self._defaults = {**DEFAULT_METRICS, **(defaults or {})}

    def fill(self, metric: str, previous: Optional[float]) -> float:
        return self._defaults[metric]


class RandomRangeFallback:
    """Uniform draw within ``METRIC_RANGES``; pass ``seed`` for reproducible runs."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def fill(self, metric: str, previous: Optional[float]) -> float:
        low, high = METRIC_RANGES[metric]
        return self._rng.uniform(low, high)


class CarryForwardFallback:
    """Repeat the previous chunk's value, falling back to a fixed default."""

    def __init__(self, defaults: dict[str, float] | None = None) -> None:
        self._fixed = FixedFallback(defaults)

    def fill(self, metric: str, previous: Optional[float]) -> float:
        if previous is not None:
            return previous
        return self._fixed.fill(metric, None)


def create_fallback_policy(config: AnalysisConfig) -> MetricFallbackPolicy:
    """Build the fallback policy named by ``config.metric_fallback``."""
    if config.metric_fallback == "random":
        return RandomRangeFallback(seed=config.fallback_seed)
    if config.metric_fallback == "carry_forward":
        return CarryForwardFallback()
    return FixedFallback()

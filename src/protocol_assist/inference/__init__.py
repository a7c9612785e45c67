"""Pluggable inference backend layer.

Usage::

    from protocol_assist.inference import IInferenceBackend, InferenceResult, RealTimeBackend
"""

from __future__ import annotations

from protocol_assist.inference.protocols import IInferenceBackend, InferenceResult
from protocol_assist.inference.realtime import RealTimeBackend

__all__ = [
    "IInferenceBackend",
    "InferenceResult",
    "RealTimeBackend",
]

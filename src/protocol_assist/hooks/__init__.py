"""Pipeline lifecycle hooks: logging, run tracking, token usage."""

from __future__ import annotations

from protocol_assist.hooks.logging_config import setup_logging
from protocol_assist.hooks.run_tracker import end_run, get_current_run, start_run, track_stage
from protocol_assist.hooks.usage_tracker import UsageSummary, get_current_usage, reset_usage

__all__ = [
    "UsageSummary",
    "end_run",
    "get_current_run",
    "get_current_usage",
    "reset_usage",
    "setup_logging",
    "start_run",
    "track_stage",
]

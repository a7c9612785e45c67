"""Builders for scripted tool-call arguments."""

from __future__ import annotations


def chunk_analysis(
    *,
    metrics: dict | None = None,
    suggestions: list[dict] | None = None,
    schedule: list[dict] | None = None,
) -> dict:
    """Arguments for one ``analyze_protocol_section`` reply."""
    return {
        "sectionMetrics": {"complexity": 0.5, "completeness": 0.5, "efficiency": 0.5} if metrics is None else metrics,
        "sectionSuggestions": suggestions or [],
        "scheduleElements": schedule or [],
    }


def suggestion(message: str, recommendation: str = "", *, type: str = "improvement", impact: str = "medium") -> dict:
    return {"type": type, "message": message, "impact": impact, "recommendation": recommendation}


def visit(name: str, window: str, *procedures: str) -> dict:
    return {"visitName": name, "window": window, "procedures": list(procedures)}


def enhanced_protocol(*sections: dict, version: str = "2.0", last_updated: str = "2024-05-01", key_changes=None) -> dict:
    """Arguments for a ``generate_enhanced_protocol`` reply."""
    return {
        "metadata": {"version": version, "lastUpdated": last_updated, "keyChanges": key_changes or []},
        "sections": list(sections)
        or [{"title": "Introduction", "content": "Study background.", "subsections": []}],
    }


def optimized_schedule(visits: list[dict], notes: list[dict] | None = None) -> dict:
    """Arguments for a ``generate_optimized_schedule`` reply."""
    return {"visits": visits, "optimizationNotes": notes or []}


def cross_validation(is_valid: bool = True, issues: list[dict] | None = None) -> dict:
    """Arguments for a ``validate_protocol_documents`` reply."""
    return {"isValid": is_valid, "issues": issues or [], "protocolUpdates": [], "scheduleUpdates": []}

"""Prompt templates for per-chunk protocol analysis."""

from __future__ import annotations

_PROMPT_DATA: dict[str, str] = {
    "CHUNK_ANALYSIS_SYSTEM_PROMPT": """You are an expert in clinical trial protocol analysis. \
You receive one section of a protocol together with the study context. Analyze it for:
- Overall complexity, completeness and efficiency, each scored between 0 and 1
- Potential improvements and optimizations, each with a type (improvement, warning \
or validation), an impact (high, medium or low), a concise message and a concrete \
recommendation
- Study schedule and visit structure: every visit named in the section, its timing \
window expressed as an offset such as +7d, -3d, +2w or +1m, and the procedures \
performed at that visit

Report only what the section supports. Respond by calling analyze_protocol_section.""",
}

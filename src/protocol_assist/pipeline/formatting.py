"""Deterministic text rendering of a generated protocol."""

from __future__ import annotations

from datetime import date

from protocol_assist.pipeline.payloads import EnhancedProtocol


def format_metadata_header(protocol: EnhancedProtocol, *, today: date | None = None) -> str:
    meta = protocol.metadata
    last_updated = meta.last_updated or (today or date.today()).isoformat()
    lines = [f"Version: {meta.version}", f"Last Updated: {last_updated}"]
    if meta.key_changes:
        lines.append("Key Changes:")
        lines.extend(f"- {change}" for change in meta.key_changes)
    return "\n".join(lines) + "\n\n"


def format_protocol(protocol: EnhancedProtocol, *, today: date | None = None) -> str:
    """Render metadata plus sections numbered ``n.`` and subsections ``n.m``.

    Numbering follows input order; numbers the model may have put in titles
    are left untouched.
    """
    parts = [format_metadata_header(protocol, today=today)]
    for n, section in enumerate(protocol.sections, start=1):
        parts.append(f"{n}. {section.title}\n\n{section.content}\n\n")
        for m, sub in enumerate(section.subsections, start=1):
            parts.append(f"{n}.{m} {sub.title}\n\n{sub.content}\n\n")
    return "".join(parts)

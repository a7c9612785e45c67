"""Study schedule merging: visit windows, procedure notes, flattening."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from protocol_assist.models import Procedure, ScheduleVisit, StudySchedule
from protocol_assist.pipeline.payloads import ScheduleElement

log = logging.getLogger(__name__)

WINDOW_PATTERN = re.compile(r"^[+-]?\d+[dDwWmM]?$")
NEEDS_REVIEW_SUFFIX = "(needs review)"

CRITICAL_PROCEDURE_NOTE = "Critical procedure - requires documentation"
SAFETY_PROCEDURE_NOTE = "Safety assessment - follow protocol guidelines"

# Lower-cased procedure name -> validation note
PROCEDURE_NOTES: dict[str, str] = {
    "informed consent": CRITICAL_PROCEDURE_NOTE,
    "eligibility": CRITICAL_PROCEDURE_NOTE,
    "randomization": CRITICAL_PROCEDURE_NOTE,
    "vital signs": SAFETY_PROCEDURE_NOTE,
    "adverse events": SAFETY_PROCEDURE_NOTE,
    "concomitant medications": SAFETY_PROCEDURE_NOTE,
}


def validate_window(window: str) -> str:
    """Return *window* unchanged if it is an offset like ``+7d``, else flag it for review."""
    window = window.strip()
    if WINDOW_PATTERN.match(window):
        return window
    return f"{window} {NEEDS_REVIEW_SUFFIX}".strip()


def procedure_note(name: str) -> Optional[str]:
    return PROCEDURE_NOTES.get(name.strip().lower())


def flatten_procedures(visits: Iterable[ScheduleVisit]) -> list[str]:
    """Sorted, distinct procedure names across *visits*."""
    return sorted({p.name for v in visits for p in v.procedures})


class ScheduleMerger:
    """Accumulates schedule elements from successive chunks into one schedule.

    Visits are keyed by name and procedures within a visit by name. The first
    window seen for a visit is kept.
    """

    def __init__(self) -> None:
        self._visits: dict[str, ScheduleVisit] = {}

    def add(self, elements: Iterable[ScheduleElement]) -> None:
        for element in elements:
            visit_name = element.visit_name.strip()
            if not visit_name:
                log.debug("Skipping schedule element without a visit name")
                continue

            visit = self._visits.get(visit_name)
            if visit is None:
                visit = ScheduleVisit(name=visit_name, window=validate_window(element.window))
                self._visits[visit_name] = visit

            known = {p.name for p in visit.procedures}
            for proc_name in element.procedures:
                proc_name = proc_name.strip()
                if not proc_name or proc_name in known:
                    continue
                visit.procedures.append(
                    Procedure(name=proc_name, required=True, notes=procedure_note(proc_name))
                )
                known.add(proc_name)

    def build(self) -> StudySchedule:
        visits = [v.model_copy(deep=True) for v in self._visits.values()]
        return StudySchedule(visits=visits, procedures=flatten_procedures(visits))


def collapse_duplicate_visits(visits: list[ScheduleVisit]) -> list[ScheduleVisit]:
    """Merge visits sharing a name, keeping the first window and rationale.

    Procedures inside a visit are keyed by name; the first occurrence wins.
    """
    by_name: dict[str, ScheduleVisit] = {}
    known: dict[str, set[str]] = {}
    for visit in visits:
        existing = by_name.get(visit.name)
        if existing is None:
            existing = by_name[visit.name] = visit.model_copy(update={"procedures": []})
            known[visit.name] = set()
        else:
            log.warning("Collapsing duplicate visit %r in generated schedule", visit.name)
        seen = known[visit.name]
        for proc in visit.procedures:
            if proc.name not in seen:
                existing.procedures.append(proc.model_copy())
                seen.add(proc.name)
    return list(by_name.values())

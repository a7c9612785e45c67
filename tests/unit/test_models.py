"""Tests for the pydantic data models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from protocol_assist.models import (
    AnalysisResult,
    ProtocolChunk,
    SectionMetrics,
    StudyDetails,
    Suggestion,
)


class TestCamelCase:
    def test_suggestion_dumps_camel_case(self) -> None:
        s = Suggestion(id="s1", message="m", auto_fix_available=True)
        dumped = s.model_dump(by_alias=True)
        assert dumped["autoFixAvailable"] is True
        assert dumped["impact"] == "medium"

    def test_accepts_aliases(self) -> None:
        s = Suggestion.model_validate({"id": "s1", "message": "m", "autoFixAvailable": True, "impact": "high"})
        assert s.auto_fix_available is True
        assert s.impact == "high"

    def test_analysis_result_round_trips_through_json(self) -> None:
        result = AnalysisResult(suggestions=[Suggestion(id="a", message="m")], chunk_count=1)
        restored = AnalysisResult.model_validate_json(result.model_dump_json(by_alias=True))
        assert restored == result


class TestConstraints:
    def test_metrics_bounded(self) -> None:
        with pytest.raises(ValidationError):
            SectionMetrics(complexity=1.2)

    def test_chunk_is_frozen(self) -> None:
        chunk = ProtocolChunk(index=0, text="x", start=0, end=1)
        with pytest.raises(ValidationError):
            chunk.text = "y"  # type: ignore[misc]

    def test_unknown_impact_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Suggestion(id="s", message="m", impact="urgent")


class TestStudyDetails:
    def test_context_drops_unset_and_keeps_extra(self) -> None:
        details = StudyDetails.model_validate({"phase": "II", "studyType": "interventional", "arms": 2})
        assert details.to_context() == {"phase": "II", "studyType": "interventional", "arms": 2}


class TestSuggestionsById:
    def test_filters_in_result_order(self) -> None:
        result = AnalysisResult(
            suggestions=[Suggestion(id=i, message=i) for i in ("a", "b", "c")]
        )
        assert [s.id for s in result.suggestions_by_id(["c", "a", "zzz"])] == ["a", "c"]

"""Suggestion similarity, categorisation and auto-fix classification."""

from __future__ import annotations

import re

_WORD = re.compile(r"\w+")

# Checked in order; the first category with a matching keyword wins
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "safety": ("safety", "risk", "adverse", "monitoring"),
    "efficiency": ("efficiency", "streamline", "optimize"),
    "compliance": ("compliance", "regulatory", "guideline"),
    "quality": ("quality", "data", "collection"),
    "design": ("design", "endpoint", "criteria"),
}
DEFAULT_CATEGORY = "general"

AUTO_FIXABLE_TYPES = frozenset({"formatting", "terminology", "standardization"})


def word_set(text: str) -> set[str]:
    """Lower-cased word tokens, split on whitespace and punctuation."""
    return set(_WORD.findall(text.lower()))


def jaccard_similarity(a: str, b: str) -> float:
    """``|A ∩ B| / |A ∪ B|`` over word sets; 0.0 when both are empty."""
    words_a, words_b = word_set(a), word_set(b)
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def is_near_duplicate(
    message: str,
    recommendation: str,
    other_message: str,
    other_recommendation: str,
    threshold: float = 0.7,
) -> bool:
    """Duplicate when either the messages or the recommendations exceed *threshold*."""
    return (
        jaccard_similarity(message, other_message) > threshold
        or jaccard_similarity(recommendation, other_recommendation) > threshold
    )


def categorize(message: str, recommendation: str) -> str:
    text = f"{message}\n{recommendation}".lower()
    for category, terms in CATEGORY_KEYWORDS.items():
        if any(term in text for term in terms):
            return category
    return DEFAULT_CATEGORY


def can_auto_fix(suggestion_type: str) -> bool:
    return suggestion_type.strip().lower() in AUTO_FIXABLE_TYPES

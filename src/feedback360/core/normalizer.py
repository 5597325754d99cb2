"""
Canonicalize free-text evaluation answers into a fixed ordinal tier.

Survey exports spell the same three answers many ways ("🎉 Parabéns! Supera as
expectativas.", "Supera expectativas", "supera", ...). The pattern tables below
are the single place where those spellings live; one generic matcher walks
them in a fixed precedence order:

  1. not-applicable phrases
  2. domain overrides (free text that always means Exceeds)
  3. NeedsImprovement -> AsExpected -> Exceeds keyword lists

Patterns are written as they appear in the exports (accents, emoji and all)
and folded once at import time with the same routine applied to answers.
"""
from __future__ import annotations

from enum import IntEnum
from typing import Any, Optional, Sequence, Tuple

from feedback360.core.text import fold, is_truthy


class Tier(IntEnum):
    UNRECOGNIZED = -1
    NOT_APPLICABLE = 0
    NEEDS_IMPROVEMENT = 1
    AS_EXPECTED = 2
    EXCEEDS = 3

    @property
    def is_rated(self) -> bool:
        """True for the three tiers that count towards averages and totals."""
        return self in RATED_TIERS

    @property
    def label(self) -> str:
        return TIER_LABELS[self]


RATED_TIERS: Tuple[Tier, ...] = (Tier.NEEDS_IMPROVEMENT, Tier.AS_EXPECTED, Tier.EXCEEDS)

# Display labels keep the proper Portuguese spelling.
TIER_LABELS = {
    Tier.UNRECOGNIZED: "Não reconhecido",
    Tier.NOT_APPLICABLE: "Não se aplica",
    Tier.NEEDS_IMPROVEMENT: "Precisa melhorar",
    Tier.AS_EXPECTED: "Atende expectativas",
    Tier.EXCEEDS: "Supera expectativas",
}

# ---------------------------------------------------------------------------
# Pattern tables
# ---------------------------------------------------------------------------

# Whole-answer matches only: "na" as a substring would hit half the language.
NOT_APPLICABLE_EXACT = ("NA", "N/A", "N.A.", "Não aplicável")
NOT_APPLICABLE_CONTAINS = ("Não se aplica", "Nao se aplica", "N/A")

EXCEEDS_OVERRIDES = (
    "problemas complexos",
    "resolve problemas difíceis",
    "criatividade",
    "inovação",
    "inovador",
    "inovadora",
    "dedicação extra",
    "hora extra",
    "horas extras",
    "além do horário",
    "além do escopo",
    "além das suas responsabilidades",
    "além de suas responsabilidades",
    "responsabilidades além",
    "assume responsabilidades",
    "vai além",
)

TIER_PATTERNS: Sequence[Tuple[Tier, Sequence[str]]] = (
    (
        Tier.NEEDS_IMPROVEMENT,
        (
            "❗ Pode melhorar: Precisa de ajustes.",
            "Pode melhorar: Precisa de ajustes.",
            "Pode melhorar",
            "Precisa de ajustes",
            "Precisa melhorar",
            "Precisa",
            "Abaixo das expectativas",
        ),
    ),
    (
        Tier.AS_EXPECTED,
        (
            "🆗 Como esperado. Atende às expectativas.",
            "Como esperado. Atende às expectativas.",
            "Atende às expectativas",
            "Atende expectativas",
            "Como esperado",
            "Atende",
        ),
    ),
    (
        Tier.EXCEEDS,
        (
            "🎉 Parabéns! Supera as expectativas.",
            "Parabéns! Supera as expectativas.",
            "Supera as expectativas",
            "Supera expectativas",
            "Supera",
            "Parabéns",
            "Excede as expectativas",
        ),
    ),
)


def _compile(patterns: Sequence[str]) -> Tuple[str, ...]:
    out = []
    for p in patterns:
        key = fold(p)
        if key and key not in out:
            out.append(key)
    return tuple(out)


_NA_EXACT = _compile(NOT_APPLICABLE_EXACT)
_NA_CONTAINS = _compile(NOT_APPLICABLE_CONTAINS)
_OVERRIDES = _compile(EXCEEDS_OVERRIDES)
_TIER_TABLE = tuple((tier, _compile(patterns)) for tier, patterns in TIER_PATTERNS)


def matches_any(text: str, patterns: Sequence[str]) -> bool:
    """Exact or substring match of folded `text` against folded patterns."""
    return any(p == text or p in text for p in patterns)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def normalize_answer(value: Any) -> Tier:
    """
    Map a raw cell value to a Tier.

    Non-string values (booleans, None, numbers) are NOT_APPLICABLE; callers that
    want checkbox cells resolved against an inline header answer should go
    through `extract_answer()` first.
    """
    if not isinstance(value, str):
        return Tier.NOT_APPLICABLE

    text = fold(value)
    if not text:
        return Tier.NOT_APPLICABLE

    if text in _NA_EXACT or matches_any(text, _NA_CONTAINS):
        return Tier.NOT_APPLICABLE

    if matches_any(text, _OVERRIDES):
        return Tier.EXCEEDS

    for tier, patterns in _TIER_TABLE:
        if matches_any(text, patterns):
            return tier

    return Tier.UNRECOGNIZED


def extract_answer(value: Any, inline_answer: Optional[str] = None) -> Optional[str]:
    """
    Pick the answer text for a cell.

    A non-empty string cell wins, unless it is only a checkbox marker ("1",
    "true", ...) and the header carries an inline answer. Truthy non-string
    cells fall back to the inline answer. Returns None when there is nothing
    to read.
    """
    if isinstance(value, str) and value.strip():
        if inline_answer and is_truthy(value):
            return inline_answer
        return value
    if inline_answer and is_truthy(value):
        return inline_answer
    return None


def score_for(tier: Tier, scores: dict) -> Optional[float]:
    """Numeric score of a rated tier under `scores` (keyed by tier ordinal)."""
    if not tier.is_rated:
        return None
    return float(scores.get(int(tier), int(tier)))

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from feedback360 import config
from feedback360.core.categories import (
    Competency,
    StrengthCategory,
    classify_competency,
    classify_strength,
)
from feedback360.core.diagnostics import Diagnostics
from feedback360.core.headers import CollaboratorKeyResolver, ParsedHeader, parse_header
from feedback360.core.normalizer import (
    RATED_TIERS,
    Tier,
    extract_answer,
    normalize_answer,
    score_for,
)
from feedback360.core.text import fold, is_blank, is_truthy

logger = logging.getLogger(__name__)

CellValue = Union[str, bool, int, float, None]
FeedbackRow = Mapping[str, CellValue]

TIER_COLORS = {
    Tier.EXCEEDS: "#4CAF50",            # green
    Tier.AS_EXPECTED: "#2196F3",        # blue
    Tier.NEEDS_IMPROVEMENT: "#FFC107",  # yellow
}

# Pie slice order
PIE_TIERS = (Tier.EXCEEDS, Tier.AS_EXPECTED, Tier.NEEDS_IMPROVEMENT)


# ---------------------------------------------------------------------------
# Column index
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColumnInfo:
    header: str
    parsed: Optional[ParsedHeader]
    competency: Optional[Competency]
    strength: Optional[StrengthCategory]

    @property
    def is_evaluation(self) -> bool:
        return self.parsed is not None


def describe_column(header: str) -> ColumnInfo:
    parsed = parse_header(header)
    if parsed is None:
        return ColumnInfo(header=header, parsed=None, competency=None, strength=None)
    return ColumnInfo(
        header=header,
        parsed=parsed,
        competency=classify_competency(parsed.question),
        strength=classify_strength(header),
    )


def index_columns(
    rows: Sequence[FeedbackRow],
    diagnostics: Optional[Diagnostics] = None,
) -> Dict[str, ColumnInfo]:
    """
    Parse and classify every distinct header once per batch.

    Rows from different exports may carry different columns, so the index is
    the union of all headers in first-seen order.
    """
    columns: Dict[str, ColumnInfo] = {}
    for row in rows:
        for header in row.keys():
            if header in columns:
                continue
            info = describe_column(header)
            columns[header] = info
            if not info.is_evaluation and diagnostics is not None:
                diagnostics.record_skipped_header(header)
    return columns


# ---------------------------------------------------------------------------
# Output types
# ---------------------------------------------------------------------------

@dataclass
class RadarPoint:
    competency: Competency
    collaborator_scores: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"competency": self.competency.label, "collaboratorScores": dict(self.collaborator_scores)}


@dataclass
class RadarResult:
    points: List[RadarPoint]
    members_with_no_ratings: List[str]

    def point_for(self, competency: Competency) -> RadarPoint:
        for p in self.points:
            if p.competency is competency:
                return p
        raise KeyError(competency)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [p.to_dict() for p in self.points],
            "membersWithNoRatings": list(self.members_with_no_ratings),
        }


@dataclass
class BarPoint:
    category: StrengthCategory
    needs_improvement: int = 0
    as_expected: int = 0
    exceeds: int = 0

    @property
    def total(self) -> int:
        return self.needs_improvement + self.as_expected + self.exceeds

    def add(self, tier: Tier) -> None:
        if tier is Tier.NEEDS_IMPROVEMENT:
            self.needs_improvement += 1
        elif tier is Tier.AS_EXPECTED:
            self.as_expected += 1
        elif tier is Tier.EXCEEDS:
            self.exceeds += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.label,
            "needsImprovement": self.needs_improvement,
            "asExpected": self.as_expected,
            "exceeds": self.exceeds,
            "total": self.total,
        }


@dataclass
class PiePoint:
    tier: Tier
    percentage: float
    color: str

    @property
    def label(self) -> str:
        return self.tier.label

    def to_dict(self) -> Dict[str, Any]:
        return {"tierLabel": self.label, "percentage": self.percentage, "color": self.color}


# ---------------------------------------------------------------------------
# Radar
# ---------------------------------------------------------------------------

@dataclass
class _Accumulator:
    total: float = 0.0
    count: int = 0


def aggregate_radar(
    rows: Sequence[FeedbackRow],
    columns: Optional[Mapping[str, ColumnInfo]] = None,
    *,
    tier_scores: Optional[Mapping[int, float]] = None,
    drop_zero_averages: Optional[bool] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> RadarResult:
    """
    Average tier score per (collaborator, competency).

    Only rated answers count; NotApplicable and unrecognized text are absent,
    not zero. Collaborators seen in competency columns but never rated end up
    in `members_with_no_ratings`.
    """
    scores = dict(tier_scores if tier_scores is not None else config.TIER_SCORES)
    drop_zero = config.RADAR_DROP_ZERO_AVERAGES if drop_zero_averages is None else drop_zero_averages
    if columns is None:
        columns = index_columns(rows, diagnostics)

    resolver = CollaboratorKeyResolver()
    acc: Dict[str, Dict[Competency, _Accumulator]] = {}

    for row_index, row in enumerate(rows):
        for header, value in row.items():
            info = columns.get(header)
            if info is None or info.parsed is None or info.competency is None:
                continue

            key = resolver.resolve(info.parsed.collaborator)
            if not key:
                continue

            answer = extract_answer(value, info.parsed.inline_answer)
            if answer is None:
                continue

            tier = normalize_answer(answer)
            if tier is Tier.UNRECOGNIZED and diagnostics is not None:
                diagnostics.record_unrecognized(row_index, header, answer)

            score = score_for(tier, scores)
            if score is None:
                continue

            bucket = acc.setdefault(key, {}).setdefault(info.competency, _Accumulator())
            bucket.total += score
            bucket.count += 1

    points: List[RadarPoint] = []
    emitted = set()
    for competency in Competency:
        point = RadarPoint(competency=competency)
        for key in resolver.keys():
            bucket = acc.get(key, {}).get(competency)
            if bucket is None or bucket.count == 0:
                continue
            average = round(bucket.total / bucket.count, 2)
            if drop_zero and not average > 0:
                continue
            point.collaborator_scores[resolver.display_name(key)] = average
            emitted.add(key)
        points.append(point)

    no_ratings = [resolver.display_name(k) for k in resolver.keys() if k not in emitted]

    logger.debug(
        "Radar: %d collaborators, %d without ratings",
        len(resolver),
        len(no_ratings),
    )
    return RadarResult(points=points, members_with_no_ratings=no_ratings)


# ---------------------------------------------------------------------------
# Strengths
# ---------------------------------------------------------------------------

def _strength_tier(value: CellValue, info: ColumnInfo) -> Optional[Tier]:
    """
    Tier for one strength cell, or None when the cell says nothing.

    A bare checkbox marker means the team ticked this strength: Exceeds.
    """
    inline = info.parsed.inline_answer if info.parsed else None
    phrase = fold(info.strength.phrase) if info.strength else ""

    marked = is_truthy(value) or (isinstance(value, str) and bool(phrase) and fold(value) == phrase)
    if marked and not inline:
        return Tier.EXCEEDS

    answer = extract_answer(value, inline)
    if answer is None:
        return None
    return normalize_answer(answer)


def aggregate_strengths(
    rows: Sequence[FeedbackRow],
    columns: Optional[Mapping[str, ColumnInfo]] = None,
    *,
    diagnostics: Optional[Diagnostics] = None,
) -> List[BarPoint]:
    """Raw tier counts per strength category, one entry per category."""
    if columns is None:
        columns = index_columns(rows, diagnostics)

    bars = {category: BarPoint(category=category) for category in StrengthCategory}

    for row_index, row in enumerate(rows):
        for header, value in row.items():
            info = columns.get(header)
            if info is None or info.parsed is None or info.strength is None:
                continue
            if is_blank(value) or value is False:
                continue

            tier = _strength_tier(value, info)
            if tier is None:
                continue
            if tier is Tier.UNRECOGNIZED and diagnostics is not None and isinstance(value, str):
                diagnostics.record_unrecognized(row_index, header, value)
            bars[info.strength].add(tier)

    return list(bars.values())


# ---------------------------------------------------------------------------
# Rating distribution
# ---------------------------------------------------------------------------

def aggregate_rating_distribution(
    rows: Sequence[FeedbackRow],
    columns: Optional[Mapping[str, ColumnInfo]] = None,
    *,
    diagnostics: Optional[Diagnostics] = None,
) -> List[PiePoint]:
    """
    Share of each rated tier across every evaluation cell in the batch.

    No competency or strength classification happens here. Percentages are
    rounded to two decimals; all zero when nothing was rated.
    """
    if columns is None:
        columns = index_columns(rows, diagnostics)

    counts = {tier: 0 for tier in RATED_TIERS}

    for row_index, row in enumerate(rows):
        for header, value in row.items():
            if not isinstance(value, str):
                continue
            info = columns.get(header)
            if info is None or not info.is_evaluation:
                continue

            tier = normalize_answer(value)
            if tier in counts:
                counts[tier] += 1
            elif tier is Tier.UNRECOGNIZED and diagnostics is not None:
                diagnostics.record_unrecognized(row_index, header, value)

    total = sum(counts.values())
    return [
        PiePoint(
            tier=tier,
            percentage=round(counts[tier] * 100.0 / total, 2) if total > 0 else 0.0,
            color=TIER_COLORS[tier],
        )
        for tier in PIE_TIERS
    ]

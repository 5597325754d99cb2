from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from feedback360.core.engine import FeedbackResult
from feedback360.core.normalizer import Tier

# Dominant-tier ties resolve towards the better outcome.
_TIER_PRIORITY = (Tier.EXCEEDS, Tier.AS_EXPECTED, Tier.NEEDS_IMPROVEMENT)


@dataclass
class CompetencyFact:
    competency: str
    team_average: Optional[float]
    rated_collaborators: int
    top_collaborator: Optional[str]
    top_score: Optional[float]


@dataclass
class AuditSnapshot:
    """
    Canonical facts derived from a FeedbackResult.

    These are the facts an insight writer is allowed to talk about. They can be
    shown to the user for manual audit, and are what gets handed to any
    external narrative generator together with the raw aggregates.
    """
    competencies: List[CompetencyFact]
    strength_totals: Dict[str, int]
    tier_percentages: Dict[str, float]
    dominant_tier: Optional[str]
    members_with_no_ratings: List[str]
    rows_processed: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _top_collaborator(scores: Dict[str, float]) -> Optional[str]:
    """Highest score; ties go to the alphabetically first display name."""
    if not scores:
        return None
    return min(scores.items(), key=lambda kv: (-kv[1], kv[0].casefold()))[0]


def build_audit_snapshot(result: FeedbackResult) -> AuditSnapshot:
    """
    Build a canonical set of audit facts from a FeedbackResult.

    This function:
      - Computes the team average and best-rated collaborator per competency
      - Totals each strength category
      - Picks the dominant tier of the rating distribution (None if nothing rated)
    """
    facts: List[CompetencyFact] = []
    for point in result.radar.points:
        scores = point.collaborator_scores
        top = _top_collaborator(scores)
        facts.append(
            CompetencyFact(
                competency=point.competency.label,
                team_average=round(sum(scores.values()) / len(scores), 2) if scores else None,
                rated_collaborators=len(scores),
                top_collaborator=top,
                top_score=scores[top] if top is not None else None,
            )
        )

    by_tier = {p.tier: p.percentage for p in result.pie}
    dominant: Optional[str] = None
    best = 0.0
    for tier in _TIER_PRIORITY:
        pct = by_tier.get(tier, 0.0)
        if pct > best:
            best = pct
            dominant = tier.label

    return AuditSnapshot(
        competencies=facts,
        strength_totals={b.category.label: b.total for b in result.bar},
        tier_percentages={p.label: p.percentage for p in result.pie},
        dominant_tier=dominant,
        members_with_no_ratings=list(result.radar.members_with_no_ratings),
        rows_processed=result.diagnostics.rows_processed,
    )


def build_insight_context(result: FeedbackResult) -> str:
    """
    JSON handed to an external insight generator: the three aggregates plus
    the audit facts. Nothing here calls out to a model.
    """
    payload = result.to_dict()
    payload["facts"] = build_audit_snapshot(result).to_dict()
    return json.dumps(payload, ensure_ascii=False, indent=2)

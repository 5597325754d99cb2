from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from feedback360.core.engine import FeedbackResult
from feedback360.core.normalizer import Tier

# Share of NeedsImprovement answers (percent) that triggers a warning.
LOW_RATING_SHARE_THRESHOLD = 20.0
TOP_STRENGTHS = 3


@dataclass
class Recommendation:
    title: str
    description: str
    priority: str  # 'high', 'medium', 'low'

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "description": self.description, "priority": self.priority}


def _team_averages(result: FeedbackResult) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for point in result.radar.points:
        scores = list(point.collaborator_scores.values())
        if scores:
            out[point.competency.label] = round(sum(scores) / len(scores), 2)
    return out


def generate_recommendations(result: FeedbackResult) -> List[Recommendation]:
    """
    Rule-based suggestions from the three aggregates.

    Rules, in output order:
      - competencies whose team average is below the AsExpected score (high)
      - the top strength categories by recognized count (medium)
      - NeedsImprovement share above LOW_RATING_SHARE_THRESHOLD (high)
      - collaborators without any rating (low)
    """
    recommendations: List[Recommendation] = []

    expected_score = float(result.params.tier_scores.get(int(Tier.AS_EXPECTED), int(Tier.AS_EXPECTED)))
    low_skills = [name for name, avg in _team_averages(result).items() if avg < expected_score]
    if low_skills:
        recommendations.append(
            Recommendation(
                title="Skill development needed",
                description=f"Focus on improving: {', '.join(low_skills)}",
                priority="high",
            )
        )

    # sorted() is stable, so ties keep category order
    ranked = sorted((b for b in result.bar if b.total > 0), key=lambda b: b.total, reverse=True)
    top = [b.category.label for b in ranked[:TOP_STRENGTHS]]
    if top:
        recommendations.append(
            Recommendation(
                title="Leverage team strengths",
                description=f"Build upon the team's core strengths: {', '.join(top)}",
                priority="medium",
            )
        )

    low_share = sum(p.percentage for p in result.pie if p.tier is Tier.NEEDS_IMPROVEMENT)
    if low_share > LOW_RATING_SHARE_THRESHOLD:
        recommendations.append(
            Recommendation(
                title="Performance improvement required",
                description=(
                    f"{low_share:.1f}% of the answers are 'Precisa melhorar'. "
                    "Consider targeted training programs."
                ),
                priority="high",
            )
        )

    if result.radar.members_with_no_ratings:
        recommendations.append(
            Recommendation(
                title="Collect more feedback",
                description=(
                    "No valid ratings for: " + ", ".join(result.radar.members_with_no_ratings)
                ),
                priority="low",
            )
        )

    return recommendations

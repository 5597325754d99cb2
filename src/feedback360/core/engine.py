from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from feedback360 import config
from feedback360.core.aggregators import (
    BarPoint,
    FeedbackRow,
    PiePoint,
    RadarResult,
    aggregate_radar,
    aggregate_rating_distribution,
    aggregate_strengths,
    index_columns,
)
from feedback360.core.diagnostics import Diagnostics

logger = logging.getLogger(__name__)


@dataclass
class AggregationParameters:
    """
    Scoring rules for one run.

    tier_scores:
      numeric score per tier ordinal (1 = NeedsImprovement, 2 = AsExpected,
      3 = Exceeds). Defaults to config.TIER_SCORES.
    drop_zero_averages:
      leave collaborators whose competency average is not > 0 out of the radar.
    """
    tier_scores: Dict[int, float] = field(default_factory=lambda: dict(config.TIER_SCORES))
    drop_zero_averages: bool = config.RADAR_DROP_ZERO_AVERAGES


@dataclass
class FeedbackResult:
    radar: RadarResult
    bar: List[BarPoint]
    pie: List[PiePoint]
    diagnostics: Diagnostics
    params: AggregationParameters

    @property
    def total_rated_percentage(self) -> float:
        return round(sum(p.percentage for p in self.pie), 2)

    def to_dict(self) -> Dict[str, Any]:
        """Chart-ready payload: radar, bar and pie, keyed like the dashboard expects."""
        return {
            "radar": self.radar.to_dict(),
            "bar": [b.to_dict() for b in self.bar],
            "pie": [p.to_dict() for p in self.pie],
        }

    def to_json(self, **kwargs: Any) -> str:
        kwargs.setdefault("ensure_ascii", False)
        return json.dumps(self.to_dict(), **kwargs)


def build_feedback_result(
    rows: Sequence[FeedbackRow],
    params: Optional[AggregationParameters] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> FeedbackResult:
    """
    Run the three aggregators over one batch of survey rows.

    Pure with respect to I/O: the same rows always give the same result. The
    aggregators share only the read-only column index. Malformed content is
    skipped and noted in `diagnostics`, never raised.
    """
    params = params or AggregationParameters()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    rows = list(rows)
    diagnostics.rows_processed += len(rows)

    columns = index_columns(rows, diagnostics)
    evaluation_cols = sum(1 for c in columns.values() if c.is_evaluation)
    logger.info(
        "Aggregating %d rows (%d columns, %d evaluation columns)",
        len(rows),
        len(columns),
        evaluation_cols,
    )

    radar = aggregate_radar(
        rows,
        columns,
        tier_scores=params.tier_scores,
        drop_zero_averages=params.drop_zero_averages,
        diagnostics=diagnostics,
    )
    bar = aggregate_strengths(rows, columns, diagnostics=diagnostics)
    pie = aggregate_rating_distribution(rows, columns, diagnostics=diagnostics)

    if diagnostics.unrecognized_values:
        logger.info(
            "%d answers did not match any tier (%d distinct)",
            sum(diagnostics.unrecognized_values.values()),
            len(diagnostics.unrecognized_values),
        )

    return FeedbackResult(radar=radar, bar=bar, pie=pie, diagnostics=diagnostics, params=params)

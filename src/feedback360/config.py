from __future__ import annotations

import os
from pathlib import Path
from typing import Dict

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Root of the project (repo root)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Folder with the survey exports offered in the file picker.
# Override with FEEDBACK360_DATA_DIR when the CSVs live elsewhere.
DATA_DIR = Path(os.getenv("FEEDBACK360_DATA_DIR", "").strip() or PROJECT_ROOT / "data")

# ---------------------------------------------------------------------------
# App identity
# ---------------------------------------------------------------------------

APP_NAME = "Feedback 360 Dashboard"
APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Remote CSV exports
#
# Optional. When set, bare file names given to the loader are resolved
# against this base URL, e.g.:
#   FEEDBACK360_CSV_BASE_URL=https://intranet.example.com/feedback/
# ---------------------------------------------------------------------------

CSV_BASE_URL = os.getenv("FEEDBACK360_CSV_BASE_URL", "").strip()
HTTP_TIMEOUT_SECONDS = int(os.getenv("FEEDBACK360_HTTP_TIMEOUT", "30").strip() or 30)

# ---------------------------------------------------------------------------
# Scoring rules
#
# Survey history used more than one numeric scale for the same three answers
# (1/3/5 and 1/2/3). The 1/2/3 scale is the default; set e.g.
#   FEEDBACK360_TIER_SCALE=1,3,5
# to score NeedsImprovement, AsExpected and Exceeds differently.
# ---------------------------------------------------------------------------

DEFAULT_TIER_SCALE = (1.0, 2.0, 3.0)


def _parse_tier_scale(raw: str) -> Dict[int, float]:
    """
    Parse "1,2,3" into {1: 1.0, 2: 2.0, 3: 3.0} keyed by tier ordinal.

    Anything that is not exactly three numbers falls back to the default scale.
    """
    values = DEFAULT_TIER_SCALE
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    if len(parts) == 3:
        try:
            values = tuple(float(p) for p in parts)
        except ValueError:
            values = DEFAULT_TIER_SCALE
    return {ordinal: score for ordinal, score in zip((1, 2, 3), values)}


def _parse_bool(raw: str, default: bool) -> bool:
    text = raw.strip().lower()
    if not text:
        return default
    return text in {"1", "true", "yes", "on"}


TIER_SCORES: Dict[int, float] = _parse_tier_scale(os.getenv("FEEDBACK360_TIER_SCALE", ""))

# Collaborators whose competency average is not > 0 are left out of the radar.
RADAR_DROP_ZERO_AVERAGES = _parse_bool(os.getenv("FEEDBACK360_RADAR_DROP_ZERO", ""), default=True)

# ---------------------------------------------------------------------------
# Logging (applied by entry points only)
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("FEEDBACK360_LOG_LEVEL", "INFO").strip().upper() or "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

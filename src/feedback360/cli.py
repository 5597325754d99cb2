"""
Feedback 360 CLI: aggregate survey exports and print or export the chart data.

Usage:
    feedback360 export.csv                        # Print validation report
    feedback360 a.csv b.csv --json out.json       # Export chart data as JSON
    feedback360 --url https://host/export.csv     # Fetch an export over HTTP
    feedback360 --list                            # CSVs available in the data dir
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from feedback360 import config
from feedback360.core.audit import build_insight_context
from feedback360.core.data_loader import (
    DataLoaderError,
    list_available_files,
    load_feedback_sources,
)
from feedback360.core.engine import AggregationParameters, build_feedback_result
from feedback360.core.recommendations import generate_recommendations


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="feedback360",
        description="Feedback 360: competency radar, strengths and rating distribution from survey CSVs",
    )
    ap.add_argument("files", nargs="*", help="Path(s) to CSV survey exports")
    ap.add_argument(
        "--url", "-u",
        action="append",
        default=[],
        metavar="URL",
        help="Fetch an export over HTTP(S); may be repeated",
    )
    ap.add_argument(
        "--json", "-j",
        default=None,
        metavar="OUTPUT.json",
        help="Write chart data (radar, bar, pie) as JSON",
    )
    ap.add_argument(
        "--context",
        default=None,
        metavar="OUTPUT.json",
        help="Write chart data plus audit facts, for an external insight writer",
    )
    ap.add_argument("--list", action="store_true", help="List CSV files in the data directory")
    ap.add_argument(
        "--keep-zero",
        action="store_true",
        help="Keep collaborators with a zero competency average in the radar",
    )
    ap.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level (default: %(default)s)")
    return ap


def _print_report(result, recommendations) -> None:
    diag = result.diagnostics
    print(f"\n  Rows:           {diag.rows_processed}")
    print(f"  Skipped cols:   {len(diag.skipped_headers)}")

    print("\n  Competencies:")
    for point in result.radar.points:
        scores = ", ".join(f"{name}={score:g}" for name, score in point.collaborator_scores.items())
        print(f"    {point.competency.label:24s} {len(point.collaborator_scores)} rated  {scores}")

    if result.radar.members_with_no_ratings:
        print(f"\n  Warning: no valid ratings for: {', '.join(result.radar.members_with_no_ratings)}")

    print("\n  Strengths (needs improvement / as expected / exceeds):")
    for bar in result.bar:
        print(f"    {bar.category.label:24s} {bar.needs_improvement} / {bar.as_expected} / {bar.exceeds}")

    print("\n  Rating distribution:")
    for slice_ in result.pie:
        print(f"    {slice_.label:24s} {slice_.percentage:6.2f}%")

    top = diag.top_unrecognized(10)
    if top:
        print(f"\n  Warning: {sum(diag.unrecognized_values.values())} unrecognized answers:")
        for text, count in top:
            print(f"    - {text!r} ({count})")

    if recommendations:
        print("\n  Recommendations:")
        for rec in recommendations:
            print(f"    [{rec.priority}] {rec.title}: {rec.description}")


def main(argv: Optional[List[str]] = None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(level=str(args.log_level).upper(), format=config.LOG_FORMAT)

    if args.list:
        files = list_available_files()
        print(f"Data directory: {config.DATA_DIR}")
        for name in files:
            print(f"  - {name}")
        if not files:
            print("  (no CSV files)")
        return 0

    sources = list(args.files) + list(args.url)
    if not sources:
        ap.print_help()
        return 0

    print(f"Loading {len(sources)} export(s)")
    try:
        rows = load_feedback_sources(sources)
    except DataLoaderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    params = AggregationParameters()
    if args.keep_zero:
        params.drop_zero_averages = False

    result = build_feedback_result(rows, params)
    recommendations = generate_recommendations(result)
    _print_report(result, recommendations)

    if args.json:
        Path(args.json).write_text(result.to_json(indent=2), encoding="utf-8")
        print(f"\n  JSON exported to: {args.json}")

    if args.context:
        Path(args.context).write_text(build_insight_context(result), encoding="utf-8")
        print(f"\n  Insight context exported to: {args.context}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

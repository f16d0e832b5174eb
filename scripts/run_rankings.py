#!/usr/bin/env python3
"""Surf spot rankings runner.

Scores every configured spot for a date and prints the ranking with the
top recommendations.

Usage:
    # Rank all spots for today (Open-Meteo data, calibrated)
    python scripts/run_rankings.py

    # One region, a specific date
    python scripts/run_rankings.py --region qingdao --date 2026-07-14

    # Offline, with repeatable simulated data
    python scripts/run_rankings.py --simulate --seed 7

    # Refresh calibration from regional marine bulletins first
    python scripts/run_rankings.py --bulletin

    # JSON output to a file
    python scripts/run_rankings.py --format json --output rankings.json
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from surfrank.clients import (
    MarineBulletinClient,
    OpenMeteoClient,
    SimulatedSampleProvider,
    refresh_calibration,
)
from surfrank.core import (
    CalibratedSampleProvider,
    CalibrationRegistry,
    ConditionScorer,
    SpotRanker,
    extract_tide_events,
    get_spot_database,
    load_scoring_config,
)


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Quiet down noisy loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date (expected YYYY-MM-DD): {value}")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Rank surf spots by forecast conditions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--date",
        type=parse_date,
        default=date.today(),
        help="Date to rank for, YYYY-MM-DD (default: today)",
    )

    parser.add_argument(
        "--region",
        type=str,
        default="all",
        help="Region key to rank, or 'all' (default: all)",
    )

    parser.add_argument(
        "--top",
        type=int,
        default=3,
        help="Number of recommendations (default: 3)",
    )

    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Use simulated data instead of Open-Meteo",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for simulated data (default: 0)",
    )

    parser.add_argument(
        "--no-calibration",
        action="store_true",
        help="Skip local calibration of model output",
    )

    parser.add_argument(
        "--bulletin",
        action="store_true",
        help="Refresh calibration factors from regional marine bulletins",
    )

    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Write output to file instead of stdout",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def build_ranker(args, spot_db) -> SpotRanker:
    """Wire provider, calibration and scorer from the arguments."""
    base = SimulatedSampleProvider(seed=args.seed) if args.simulate else OpenMeteoClient()

    registry = CalibrationRegistry()
    if not args.no_calibration:
        registry = CalibrationRegistry.from_spots(spot_db.get_all_spots())
        if args.bulletin:
            refresh_calibration(
                registry,
                MarineBulletinClient(),
                spot_db.get_all_spots(),
                base,
                args.date,
            )

    provider = CalibratedSampleProvider(base, registry)
    scorer = ConditionScorer(load_scoring_config())
    return SpotRanker(provider, scorer=scorer, spot_db=spot_db)


def analysis_to_dict(analysis, day: date) -> dict:
    """Serialize an analysis for JSON output."""
    sample = analysis.sample
    data = {
        "spot_id": analysis.spot.id,
        "name": analysis.spot.name,
        "region": analysis.spot.region,
        "available": analysis.available,
        "scores": {
            "wave": analysis.scores.wave,
            "wind": analysis.scores.wind,
            "tide": analysis.scores.tide,
            "weather": analysis.scores.weather,
            "overall": analysis.scores.overall,
        },
        "level": analysis.scores.level.key,
        "summary": analysis.suggestion.summary,
        "suggestions": list(analysis.suggestion.suggestions),
        "warnings": list(analysis.suggestion.warnings),
    }

    if sample is not None:
        data["conditions"] = {
            "wave_height": sample.wave.height,
            "wave_period": sample.wave.period,
            "wind_speed": sample.wind.speed,
            "wind_direction": sample.wind.compass,
            "tide_level": sample.tide.level.value if sample.tide.level else None,
            "tide_height": sample.tide.height,
            "weather": sample.weather.condition.value if sample.weather.condition else None,
            "water_temperature": sample.water_temperature,
            "source": sample.source,
            "calibrated": sample.calibrated,
        }
        if sample.hourly is not None and len(sample.hourly):
            data["tides"] = [
                {"time": e.time, "type": e.type.value, "height": e.height}
                for e in extract_tide_events(sample.hourly.tide_height, day)
            ]

    return data


def format_json(analyses, ranked, day: date) -> str:
    return json.dumps(
        {
            "date": day.isoformat(),
            "rankings": [analysis_to_dict(a, day) for a in analyses],
            "top": [
                {
                    "rank": r.rank,
                    "spot_id": r.spot.id,
                    "name": r.spot.name,
                    "region": r.region,
                    "score": r.score,
                    "level": r.level.key,
                    "reason": r.reason,
                }
                for r in ranked
            ],
        },
        indent=2,
        ensure_ascii=False,
    )


def format_text(analyses, ranked, day: date) -> str:
    lines = []
    lines.append("=" * 60)
    lines.append(f"SURF RANKINGS - {day.strftime('%A, %B %d, %Y')}")
    lines.append("=" * 60)
    lines.append("")

    lines.append("TOP PICKS")
    lines.append("-" * 60)
    for r in ranked:
        lines.append(f"  {r.rank}. {r.spot.name} ({r.region}) - {r.score:.1f} {r.level.label}")
        lines.append(f"     {r.reason}")
    lines.append("")

    lines.append("ALL SPOTS")
    lines.append("-" * 60)
    for analysis in analyses:
        scores = analysis.scores
        lines.append(
            f"  {analysis.spot.name:<24} {scores.overall:>4.1f}  "
            f"wave {scores.wave:.1f}  wind {scores.wind:.1f}  "
            f"tide {scores.tide:.1f}  weather {scores.weather:.1f}"
        )
        lines.append(f"    {analysis.suggestion.summary}")
        for suggestion in analysis.suggestion.suggestions:
            lines.append(f"    + {suggestion}")
        for warning in analysis.suggestion.warnings:
            lines.append(f"    ! {warning}")

        sample = analysis.sample
        if sample is not None and sample.hourly is not None and len(sample.hourly):
            events = extract_tide_events(sample.hourly.tide_height, day)
            tides = ", ".join(f"{e.type.value} {e.time} ({e.height:.1f}m)" for e in events)
            lines.append(f"    Tides: {tides}")
        lines.append("")

    return "\n".join(lines)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    spot_db = get_spot_database()
    if args.region != "all" and args.region not in spot_db.regions:
        print(f"Unknown region: {args.region} (choose from: {', '.join(spot_db.regions)})", file=sys.stderr)
        return 2

    print(f"Ranking {args.region} spots for {args.date.isoformat()}...", file=sys.stderr)

    ranker = build_ranker(args, spot_db)
    analyses = ranker.rank_region(args.region, args.date)
    ranked = ranker.top_n(analyses, args.top)

    if args.format == "json":
        output = format_json(analyses, ranked, args.date)
    else:
        output = format_text(analyses, ranked, args.date)

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(output, encoding="utf-8")
        print(f"Output written to: {output_path}", file=sys.stderr)
    else:
        print(output)

    unavailable = sum(1 for a in analyses if not a.available)
    if unavailable:
        print(f"Warning: no data for {unavailable} of {len(analyses)} spots", file=sys.stderr)

    return 0 if unavailable < len(analyses) else 1


if __name__ == "__main__":
    sys.exit(main())

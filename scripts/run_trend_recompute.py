#!/usr/bin/env python3
"""
Run trend recompute flow.

This script rebuilds trend_events from the stored evidence of the last week.

Usage:
    # Recompute every topic as of now
    python scripts/run_trend_recompute.py

    # Recompute selected topics as of a fixed time
    python scripts/run_trend_recompute.py --topic "border policy" --topic tariffs \\
        --reference-time 2026-10-01T12:00:00+00:00
"""

import argparse
import sys
from datetime import datetime

from campaign_intel_etl.flows.trend_flow import trend_recompute_flow
from campaign_intel_etl.utils.timeutils import ensure_utc


def main():
    parser = argparse.ArgumentParser(
        description="Run trend recompute flow",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--reference-time",
        type=datetime.fromisoformat,
        help="Scoring time in ISO format (default: now, UTC)",
    )
    parser.add_argument(
        "--topic",
        action="append",
        dest="topics",
        help="Topic key to recompute (repeatable, default: all topics)",
    )

    args = parser.parse_args()
    reference_time = ensure_utc(args.reference_time) if args.reference_time else None

    print("=" * 80)
    print("TREND RECOMPUTE")
    print("=" * 80)
    print(f"Reference time: {reference_time.isoformat() if reference_time else 'now'}")
    print(f"Topics: {', '.join(args.topics) if args.topics else 'all'}")
    print("=" * 80)
    print()

    try:
        results = trend_recompute_flow(reference_time=reference_time, topic_keys=args.topics)

        print("\n" + "=" * 80)
        print("RECOMPUTE COMPLETE!")
        print("=" * 80)
        print(f"Topics: {results.get('topics', 0):,}")
        print(f"Trending: {results.get('trending', 0):,}")
        print(f"Breaking: {results.get('breaking', 0):,}")
        print(f"Decayed: {len(results.get('decayed', [])):,}")

        if results.get("top_trends"):
            print("\nTop trends:")
            for title in results["top_trends"]:
                print(f"  - {title}")

        if results.get("failed"):
            print(f"\n❌ Failed topics: {len(results['failed'])}")

        print("=" * 80)

        # Exit with appropriate code
        sys.exit(0 if results.get("success", False) else 1)

    except Exception as e:
        print(f"\n❌ Recompute failed: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()

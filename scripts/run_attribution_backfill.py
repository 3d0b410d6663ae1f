#!/usr/bin/env python3
"""
Run attribution backfill flow.

This script attributes stored ActBlue transactions of one organization
through the attribution waterfall, batch by batch.

Usage:
    # Attribute every unattributed transaction
    python scripts/run_attribution_backfill.py --org 3f1c...

    # Restrict to a date range and recompute existing attribution
    python scripts/run_attribution_backfill.py --org 3f1c... \\
        --start-date 2026-09-01 --end-date 2026-09-30 --reattribute

    # Only print the attribution summary for a range
    python scripts/run_attribution_backfill.py --org 3f1c... \\
        --start-date 2026-09-01 --end-date 2026-09-30 --summary-only
"""

import argparse
import sys
from datetime import date

from campaign_intel_etl.flows.attribution_flow import (
    attribution_backfill_flow,
    attribution_summary_flow,
)


def print_summary(summary: dict) -> None:
    """Print an attribution summary."""
    print(f"Donations: {summary.get('total', 0):,}")
    for level, count in summary.get("level_counts", {}).items():
        pct = summary.get("level_percentages", {}).get(level, 0.0)
        print(f"  {level:15s} {count:>8,} ({pct:.1f}%)")
    for tier, count in summary.get("tier_counts", {}).items():
        print(f"  tier {tier}: {count:,}")
    for warning in summary.get("warnings", []):
        print(f"⚠️  {warning}")


def main():
    parser = argparse.ArgumentParser(
        description="Run attribution backfill flow",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--org",
        type=str,
        required=True,
        help="Organization ID",
    )
    parser.add_argument(
        "--start-date",
        type=date.fromisoformat,
        help="First transaction day (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--end-date",
        type=date.fromisoformat,
        help="Last transaction day (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        help="Transactions per batch (default: BATCH_SIZE setting)",
    )
    parser.add_argument(
        "--reattribute",
        action="store_true",
        help="Recompute transactions that already have attribution",
    )
    parser.add_argument(
        "--summary-only",
        action="store_true",
        help="Print the attribution summary without writing anything",
    )

    args = parser.parse_args()

    if (args.start_date is None) != (args.end_date is None):
        parser.error("--start-date and --end-date must be given together")
    if args.summary_only and args.start_date is None:
        parser.error("--summary-only requires --start-date and --end-date")

    print("=" * 80)
    print("ATTRIBUTION SUMMARY" if args.summary_only else "ATTRIBUTION BACKFILL")
    print("=" * 80)
    print(f"Organization: {args.org}")
    print(f"Date range: {args.start_date or 'all'} to {args.end_date or 'all'}")
    if not args.summary_only:
        print(f"Reattribute: {args.reattribute}")
    print("=" * 80)
    print()

    try:
        if args.summary_only:
            results = attribution_summary_flow(
                organization_id=args.org,
                start_date=args.start_date,
                end_date=args.end_date,
            )
            print_summary(results)
        else:
            results = attribution_backfill_flow(
                organization_id=args.org,
                start_date=args.start_date,
                end_date=args.end_date,
                batch_size=args.batch_size,
                reattribute=args.reattribute,
            )

            print("\n" + "=" * 80)
            print("BACKFILL COMPLETE!")
            print("=" * 80)
            print(f"Batches: {results.get('batches', 0):,}")
            print(f"Attributed: {results.get('processed', 0):,}")
            for tier, count in results.get("tier_counts", {}).items():
                print(f"  tier {tier}: {count:,}")
            if results.get("failed_batches"):
                print(f"\n❌ Failed batches: {len(results['failed_batches'])}")

        print("=" * 80)

        # Exit with appropriate code
        sys.exit(0 if results.get("success", False) else 1)

    except Exception as e:
        print(f"\n❌ Attribution failed: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Sample directory harness for end-to-end validation.

Loads the sample seed documents into a throwaway document store, runs a
full directory fetch (profile query, normalization, review batches) and
prints what came out. Optionally records one review to exercise the
dual write.

Usage:
    # Seed an in-memory database and print the directory
    python scripts/run_sample_directory.py

    # Use a SQLite file and add a review for one carer
    python scripts/run_sample_directory.py --database /tmp/carers.db --review amelia-stone 4

    # Custom seed file
    python scripts/run_sample_directory.py --seed data/seed.example.yaml
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from carer_directory.config.models import AppConfig
from carer_directory.directory import CarerDirectory, build_directory
from carer_directory.logging.config import configure_logging
from carer_directory.main import import_documents
from carer_directory.persistence.store import SqlDocumentStore


def print_header(title: str):
    """Print a formatted section header."""
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def print_directory_table(directory: CarerDirectory):
    """Print one row per carer with rating summary and location."""
    print_header("Directory Summary")

    rows = [("Carer", "Rating", "Reviews", "Location")]
    for carer in directory.all_carers:
        location = f"{carer.location.lat:.4f}, {carer.location.lng:.4f}" if carer.location else "-"
        rows.append((carer.name, f"{carer.average_rating:.2f}", str(carer.review_count), location))

    widths = [max(len(row[column]) for row in rows) for column in range(4)]
    border = "─┼─".join("─" * width for width in widths)

    for index, row in enumerate(rows):
        print(" │ ".join(cell.ljust(width) for cell, width in zip(row, widths)))
        if index == 0:
            print(border)

    if directory.state.load_error:
        print(f"\nLoad error: {directory.state.load_error}")

    for carer in directory.all_carers:
        print(f"\n{carer.name} ({carer.id})")
        for line in directory.get_description(carer.id).splitlines():
            print(f"  {line}")


async def run(args) -> int:
    database_url = f"sqlite:///{args.database.absolute()}" if args.database else "sqlite://"
    store = SqlDocumentStore(database_url)
    try:
        written = await import_documents(store, args.seed)
        print(f"✓ Imported {written} documents into {database_url}")

        directory = build_directory(AppConfig(), store=store)
        await directory.fetch_carers()
        print_directory_table(directory)

        if args.review:
            carer_id, rating = args.review
            print_header("Review")
            recorded = await directory.add_review(carer_id, rating)
            print(f"{'✓' if recorded else '✗'} Review {rating} for {carer_id}")
            print(f"  Average rating is now {directory.get_average_rating(carer_id):.2f}")
            if not recorded:
                return 1

        return 1 if directory.state.load_error else 0
    finally:
        store.close()


def main():
    """Main entry point for the sample directory harness."""
    parser = argparse.ArgumentParser(
        description="Load sample documents and print the resulting carer directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--seed",
        type=Path,
        default=Path("data/seed.example.yaml"),
        help="Seed YAML file (default: data/seed.example.yaml)",
    )
    parser.add_argument(
        "--database",
        type=Path,
        default=None,
        help="SQLite file to use instead of an in-memory database",
    )
    parser.add_argument(
        "--review",
        nargs=2,
        metavar=("CARER_ID", "RATING"),
        help="Record a review after loading",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: WARNING)",
    )

    args = parser.parse_args()
    configure_logging(level=args.log_level, format_type="key-value", environment="validation")

    print_header("Carer Directory - Sample Harness")
    print(f"Seed file: {args.seed}")

    if not args.seed.exists():
        print(f"\n❌ Error: Seed file not found: {args.seed}")
        return 1

    try:
        return asyncio.run(run(args))
    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
Command-line interface for the Hansard pipeline.

Usage:
    hansard-pipeline ingest
    hansard-pipeline ingest --date 2024-05-23 --chamber Commons --output results.json
    hansard-pipeline ingest --record-id ABC123
    hansard-pipeline reconcile
    hansard-pipeline sync-members
    hansard-pipeline init-db
"""

import asyncio
import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from ..config import get_settings
from ..models import AdapterResponse, AdapterStatus, ProceedingRecord
from ..runtime import open_runtime

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    app_config = get_settings().app
    logging.basicConfig(
        level=logging.DEBUG if verbose else app_config.log_level.upper(),
        format=app_config.log_format
    )
    if verbose:
        logger.debug("Verbose logging enabled")


def _write_output(response: AdapterResponse[ProceedingRecord], output_file: str) -> Path:
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(response.model_dump_json(indent=2))

    return output_path


def _print_response(response: AdapterResponse[ProceedingRecord]) -> None:
    records: List[ProceedingRecord] = response.data or []

    print("\n" + "="*60)
    print("RESULTS")
    print("="*60)
    print(f"Status: {response.status.value}")
    print(f"Sitting date: {response.sitting_date or 'n/a'}")
    print(f"Records: {len(records)}")
    print(f"Errors: {len(response.errors)}")
    print(f"Duration: {response.metrics.duration_seconds:.2f}s")
    print(f"Skipped: {response.metrics.records_skipped}")

    if response.errors:
        print("\n⚠️  Errors:")
        for i, error in enumerate(response.errors[:5], 1):
            print(f"  {i}. [{error.error_type}] {error.message}")
        if len(response.errors) > 5:
            print(f"  ... and {len(response.errors) - 5} more errors")

    if records:
        print("\n📋 Sample records (first 3):")
        for i, record in enumerate(records[:3], 1):
            print(f"\n  {i}. {record.external_id} - {record.title[:80]}")
            print(f"     {record.chamber} / {record.record_type} / {record.date}")
            speakers = record.speaker_names()
            if speakers:
                print(f"     Speakers: {', '.join(speakers[:5])}")


async def run_ingest(
    sitting_date: Optional[date],
    chamber: Optional[str],
    record_id: Optional[str],
    output_file: Optional[str],
) -> int:
    """
    Ingest proceedings and report the outcome.

    Args:
        sitting_date: Day to ingest (latest sitting day when omitted)
        chamber: Restrict to one chamber
        record_id: Ingest one record by external id instead
        output_file: Optional JSON output file path
    """
    async with open_runtime() as runtime:
        pipeline = runtime.ingestion_pipeline()
        if record_id:
            response = await pipeline.run_for_record(record_id)
        else:
            response = await pipeline.run(sitting_date=sitting_date, chamber=chamber)

    _print_response(response)

    if output_file:
        output_path = _write_output(response, output_file)
        print(f"\n💾 Results saved to: {output_path.absolute()}")

    print("\n" + "="*60)
    if response.status == AdapterStatus.FAILURE:
        print("❌ Ingestion FAILED\n")
        return 1
    if response.status == AdapterStatus.PARTIAL_SUCCESS:
        print("⚠️  Ingestion PARTIAL SUCCESS (some errors)\n")
    else:
        print("✅ Ingestion SUCCESSFUL\n")
    return 0


async def run_reconcile() -> int:
    async with open_runtime() as runtime:
        report = await runtime.speaker_reconciler().reconcile()

    print(
        f"Processed {report.processed} names: {report.discrepancies} discrepancies, "
        f"{report.recorded} new matches, {report.no_results} without results, "
        f"{report.failures} failures"
    )
    return 0


async def run_sync_members() -> int:
    async with open_runtime() as runtime:
        total = await runtime.member_sync().sync_all_members()

    print(f"Synced {total} members")
    return 0


async def run_init_db() -> int:
    async with open_runtime(create_tables=True):
        pass
    print("Database tables created")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hansard-pipeline",
        description="Ingest UK Parliament Hansard proceedings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ingest the latest sitting day for both Houses
  hansard-pipeline ingest

  # Ingest one day of Commons proceedings and save to JSON
  hansard-pipeline ingest --date 2024-05-23 --chamber Commons --output results.json

  # Suggest canonical names for stored speaker names
  hansard-pipeline --verbose reconcile
        """
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Ingest proceedings for a sitting day")
    ingest.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Sitting date (YYYY-MM-DD); defaults to the latest sitting day"
    )
    ingest.add_argument(
        "--chamber",
        choices=["Commons", "Lords"],
        help="Only ingest one chamber"
    )
    ingest.add_argument(
        "--record-id",
        help="Ingest a single record by external id"
    )
    ingest.add_argument(
        "--output",
        type=str,
        help="Save results to JSON file"
    )

    subparsers.add_parser("reconcile", help="Match stored speaker names to member names")
    subparsers.add_parser("sync-members", help="Copy the member roster into the registry")
    subparsers.add_parser("init-db", help="Create database tables")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    load_dotenv()
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        if args.command == "ingest":
            coro = run_ingest(
                sitting_date=args.date,
                chamber=args.chamber,
                record_id=args.record_id,
                output_file=args.output,
            )
        elif args.command == "reconcile":
            coro = run_reconcile()
        elif args.command == "sync-members":
            coro = run_sync_members()
        else:
            coro = run_init_db()
        return asyncio.run(coro)
    except Exception as e:
        print(f"\n❌ {args.command} FAILED with exception: {e}\n")
        logger.error("%s failed", args.command, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
Prefect flows for Hansard ingestion, speaker reconciliation and member sync.

Tasks take plain parameters and open their own runtime (API client and
database) so they can run on any worker.

Responsibility: Orchestration of the Hansard data pipeline
"""

import asyncio
from datetime import date
from typing import Any, Dict, Optional
import logging

from prefect import flow, task, get_run_logger

from ..models import AdapterStatus
from ..runtime import open_runtime

logger = logging.getLogger(__name__)


@task(name="ingest_proceedings", retries=1, retry_delay_seconds=60)
async def ingest_proceedings_task(
    sitting_date: Optional[str] = None,
    chamber: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Ingest one sitting day of proceedings.

    Args:
        sitting_date: ISO date to ingest (latest sitting day when omitted)
        chamber: Restrict to one chamber

    Returns:
        Summary of the run
    """
    logger_task = get_run_logger()
    logger_task.info(f"Ingesting proceedings: date={sitting_date or 'latest'}, chamber={chamber or 'all'}")

    async with open_runtime() as runtime:
        response = await runtime.ingestion_pipeline().run(
            sitting_date=date.fromisoformat(sitting_date) if sitting_date else None,
            chamber=chamber,
        )

    if response.errors:
        logger_task.warning(f"{len(response.errors)} records failed: {response.errors[:5]}")

    summary = {
        "status": response.status.value,
        "sitting_date": response.sitting_date,
        "records": len(response.data or []),
        "errors": len(response.errors),
        "skipped": response.metrics.records_skipped,
        "duration_seconds": response.metrics.duration_seconds,
    }
    if response.status == AdapterStatus.FAILURE:
        raise RuntimeError(f"Ingestion failed: {summary}")

    logger_task.info(f"Ingestion complete: {summary}")
    return summary


@task(name="reconcile_speaker_names")
async def reconcile_speaker_names_task() -> Dict[str, Any]:
    """Compare stored speaker names with the member search."""
    logger_task = get_run_logger()

    async with open_runtime() as runtime:
        report = await runtime.speaker_reconciler().reconcile()

    result = {
        "processed": report.processed,
        "discrepancies": report.discrepancies,
        "recorded": report.recorded,
        "no_results": report.no_results,
        "skipped": report.skipped,
        "failures": report.failures,
    }
    logger_task.info(f"Reconciliation complete: {result}")
    return result


@task(name="sync_members", retries=2, retry_delay_seconds=120)
async def sync_members_task() -> int:
    """Copy the upstream member roster into the registry."""
    logger_task = get_run_logger()

    async with open_runtime() as runtime:
        total = await runtime.member_sync().sync_all_members()

    logger_task.info(f"Synced {total} members")
    return total


@flow(name="ingest_latest_proceedings_flow")
async def ingest_latest_proceedings_flow(
    sitting_date: Optional[str] = None,
    chamber: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Flow to ingest the latest (or a given) sitting day.
    """
    logger.info("Starting proceedings ingestion flow (date=%s, chamber=%s)", sitting_date, chamber)
    return await ingest_proceedings_task(sitting_date=sitting_date, chamber=chamber)


@flow(name="reconcile_speaker_names_flow")
async def reconcile_speaker_names_flow() -> Dict[str, Any]:
    """
    Flow to suggest canonical names for stored speaker names.
    """
    return await reconcile_speaker_names_task()


@flow(name="sync_members_flow")
async def sync_members_flow() -> Dict[str, Any]:
    """
    Flow to refresh the member registry from the upstream roster.
    """
    total = await sync_members_task()
    return {"members_synced": total}


if __name__ == "__main__":  # pragma: no cover
    asyncio.run(ingest_latest_proceedings_flow())

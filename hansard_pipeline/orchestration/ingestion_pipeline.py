"""
Proceedings ingestion orchestration.

Coordinates one ingestion run: resolve the sitting date → crawl section
trees (stepping back over non-sitting days) → drop already stored records
→ enrich leaves → filter procedural records → persist.

Responsibility: Orchestrate a full ingestion run and report its outcome
"""

from datetime import date, datetime, timezone
from typing import List, Optional, Tuple
import logging

from ..adapters import HansardClient
from ..config import PipelineConfig
from ..models import (
    AdapterMetrics,
    AdapterResponse,
    AdapterStatus,
    LeafRecordRef,
    ProceedingRecord,
)
from ..parsing import procedural_reason
from ..services import (
    CrawlResult,
    MemberRegistry,
    MemberResolver,
    PipelineRunContext,
    ProceedingStore,
    RecordEnricher,
    SectionTreeCrawler,
    SittingDateCache,
    SittingDateResolver,
)
from ..utils import dedupe_by_key, gather_in_batches

logger = logging.getLogger(__name__)

SOURCE_NAME = "hansard_pipeline"


class IngestionPipeline:
    """
    Orchestrates the proceedings ingestion pipeline.

    Pipeline stages:
    1. Resolve the latest sitting date (unless one is given)
    2. Crawl every chamber's section trees, rewinding over empty days
    3. Skip leaves already held by the record store
    4. Enrich the remaining leaves into proceeding records
    5. Drop procedural records and persist the rest

    Example:
        pipeline = IngestionPipeline(client, registry, store=store)
        response = await pipeline.run()
        records = response.data
    """

    def __init__(
        self,
        client: HansardClient,
        registry: MemberRegistry,
        store: Optional[ProceedingStore] = None,
        config: Optional[PipelineConfig] = None,
        sitting_dates: Optional[SittingDateResolver] = None,
    ):
        """
        Initialize the ingestion pipeline.

        Args:
            client: Hansard API client
            registry: Member registry used to backfill speaker identities
            store: Optional record store for duplicate skipping and persistence
            config: Batch size, pacing, rewind and filter settings
            sitting_dates: Resolver to share across runs (keeps its cache warm)
        """
        self.client = client
        self.store = store
        self.config = config or PipelineConfig()
        self.sitting_dates = sitting_dates or SittingDateResolver(
            client,
            SittingDateCache(ttl_seconds=self.config.sitting_date_ttl_seconds),
            chambers=self.config.chambers,
        )
        self.crawler = SectionTreeCrawler(
            client,
            batch_size=self.config.section_batch_size,
            batch_delay_seconds=self.config.batch_delay_seconds,
        )
        self.enricher = RecordEnricher(client, MemberResolver(registry))

        logger.info("IngestionPipeline initialized")

    async def run(
        self,
        sitting_date: Optional[date] = None,
        chamber: Optional[str] = None,
        rewind: bool = True,
    ) -> AdapterResponse[ProceedingRecord]:
        """
        Ingest every proceeding for a sitting day.

        Args:
            sitting_date: Day to ingest (defaults to the latest sitting date)
            chamber: Restrict to one chamber (defaults to all configured)
            rewind: Step back over days with no published records

        Returns:
            AdapterResponse containing the kept ProceedingRecord objects

        Raises:
            HansardAPIError: if the sitting date or section lists cannot be fetched
        """
        start_time = datetime.now(timezone.utc)
        context = PipelineRunContext()
        chambers = [chamber] if chamber else list(self.config.chambers)

        logger.info(
            f"Starting ingestion run: date={sitting_date}, chambers={chambers}, rewind={rewind}"
        )

        try:
            if sitting_date is None:
                sitting_date = await self.sitting_dates.resolve_last_sitting_date(chamber)
            crawl = await self._crawl(sitting_date, chambers, rewind)
        except Exception as e:
            logger.error(f"Ingestion run failed before enrichment: {e}")
            raise

        leaves, duplicate_count = dedupe_by_key(crawl.leaves(chambers), lambda leaf: leaf.external_id)
        if duplicate_count:
            logger.info(f"Dropped {duplicate_count} duplicate leaf references")

        leaves, already_stored = await self._filter_existing(leaves)
        logger.info(
            f"Enriching {len(leaves)} records ({already_stored} already stored)"
        )

        async def enrich_one(leaf: LeafRecordRef) -> Optional[ProceedingRecord]:
            return await self.enricher.enrich(leaf, context)

        assembled = await gather_in_batches(
            leaves,
            enrich_one,
            batch_size=self.config.section_batch_size,
            delay_seconds=self.config.batch_delay_seconds,
        )
        records = [record for record in assembled if record is not None]
        records, procedural = self._filter_procedural(records)

        await self._persist(records)

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        metrics = AdapterMetrics(
            records_attempted=len(leaves),
            records_succeeded=len(records),
            records_failed=len(context.errors),
            duration_seconds=duration,
            records_skipped=already_stored + procedural,
        )
        status = self._determine_final_status(context, len(records))

        logger.info(
            f"Pipeline complete: status={status}, date={crawl.sitting_date}, "
            f"records={len(records)}, errors={len(context.errors)}"
        )

        return AdapterResponse(
            status=status,
            data=records,
            errors=context.errors,
            metrics=metrics,
            source=SOURCE_NAME,
            fetch_timestamp=datetime.now(timezone.utc),
            sitting_date=crawl.sitting_date.isoformat() if crawl.sitting_date else None,
        )

    async def run_for_record(self, external_id: str) -> AdapterResponse[ProceedingRecord]:
        """
        Ingest a single record by id.

        Date and chamber come from the record's own overview. The
        procedural filter and the already-stored check do not apply.
        """
        start_time = datetime.now(timezone.utc)
        context = PipelineRunContext()

        logger.info(f"Processing specific record: {external_id}")
        record = await self.enricher.enrich(LeafRecordRef(external_id=external_id), context)
        records: List[ProceedingRecord] = [record] if record is not None else []

        await self._persist(records)

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        return AdapterResponse(
            status=self._determine_final_status(context, len(records)),
            data=records,
            errors=context.errors,
            metrics=AdapterMetrics(
                records_attempted=1,
                records_succeeded=len(records),
                records_failed=len(context.errors),
                duration_seconds=duration,
            ),
            source=SOURCE_NAME,
            fetch_timestamp=datetime.now(timezone.utc),
            sitting_date=record.date.isoformat() if record and record.date else None,
        )

    async def _crawl(
        self,
        sitting_date: date,
        chambers: List[str],
        rewind: bool,
    ) -> CrawlResult:
        if rewind:
            return await self.crawler.crawl_with_rewind(
                sitting_date, chambers, max_days=self.config.max_rewind_days
            )

        leaves_by_chamber = {}
        for name in chambers:
            leaves_by_chamber[name] = await self.crawler.crawl(sitting_date, name)
        return CrawlResult(sitting_date=sitting_date, leaves_by_chamber=leaves_by_chamber)

    async def _filter_existing(
        self,
        leaves: List[LeafRecordRef],
    ) -> Tuple[List[LeafRecordRef], int]:
        """
        Drop leaves the record store already holds.

        If the store cannot be queried the run proceeds unfiltered.
        """
        if self.store is None or not self.config.skip_existing or not leaves:
            return leaves, 0

        try:
            existing = await self.store.existing_ids(leaf.external_id for leaf in leaves)
        except Exception as e:
            logger.warning(f"Could not check stored records, proceeding unfiltered: {e}")
            return leaves, 0

        remaining = [leaf for leaf in leaves if leaf.external_id not in existing]
        return remaining, len(leaves) - len(remaining)

    def _filter_procedural(
        self,
        records: List[ProceedingRecord],
    ) -> Tuple[List[ProceedingRecord], int]:
        if not self.config.filter_procedural:
            return records, 0

        kept: List[ProceedingRecord] = []
        for record in records:
            reason = procedural_reason(record, strict=self.config.strict_procedural_filter)
            if reason:
                logger.debug(f"Skipping {record.external_id} ({reason})")
                continue
            kept.append(record)
        return kept, len(records) - len(kept)

    async def _persist(self, records: List[ProceedingRecord]) -> None:
        if self.store is None or not records:
            return
        saved = await self.store.save_records(records)
        logger.info(f"Persisted {saved} records")

    @staticmethod
    def _determine_final_status(
        context: PipelineRunContext,
        successful_records: int,
    ) -> AdapterStatus:
        """
        Determine final run status.

        Logic:
        - If records failed and none succeeded → FAILURE
        - If some records failed → PARTIAL_SUCCESS
        - Otherwise → SUCCESS (an empty sitting day is not a failure)
        """
        if context.errors and successful_records == 0:
            return AdapterStatus.FAILURE

        if context.errors:
            return AdapterStatus.PARTIAL_SUCCESS

        return AdapterStatus.SUCCESS

"""
Runtime wiring shared by the CLI and the Prefect flows.

Responsibility: Build and tear down the client, database and stores for a run
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator, Optional
import logging

from .adapters import HansardClient
from .config import Settings, get_settings
from .db import Database, SqlMemberRegistry, SqlProceedingStore
from .orchestration import IngestionPipeline
from .services import MatchCandidateStore, MemberSync, SpeakerReconciler

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Live resources for one command or flow run."""
    settings: Settings
    client: HansardClient
    database: Database
    registry: SqlMemberRegistry
    store: SqlProceedingStore

    def ingestion_pipeline(self) -> IngestionPipeline:
        return IngestionPipeline(
            self.client,
            self.registry,
            store=self.store,
            config=self.settings.pipeline,
        )

    def speaker_reconciler(self) -> SpeakerReconciler:
        reconciler_config = self.settings.reconciler
        return SpeakerReconciler(
            self.client,
            self.registry,
            MatchCandidateStore(reconciler_config.matches_file),
            threshold=reconciler_config.similarity_threshold,
            lookup_delay_seconds=reconciler_config.lookup_delay_seconds,
        )

    def member_sync(self) -> MemberSync:
        return MemberSync(
            self.client,
            self.registry,
            page_delay_seconds=self.settings.pipeline.batch_delay_seconds,
        )


@asynccontextmanager
async def open_runtime(
    settings: Optional[Settings] = None,
    create_tables: bool = True,
) -> AsyncGenerator[Runtime, None]:
    """
    Open the API client and database for the duration of a run.

    Example:
        async with open_runtime() as runtime:
            response = await runtime.ingestion_pipeline().run()
    """
    settings = settings or get_settings()
    database = Database(settings.db)
    await database.initialize()
    client = HansardClient(settings.hansard)

    try:
        if create_tables:
            await database.create_tables()
        yield Runtime(
            settings=settings,
            client=client,
            database=database,
            registry=SqlMemberRegistry(database),
            store=SqlProceedingStore(database),
        )
    finally:
        await client.close()
        await database.close()

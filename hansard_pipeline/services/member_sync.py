"""
Member roster sync.

Pages through the member search (current and former members) and upserts
every member into the registry, so record enrichment can resolve member
ids that attribution text alone does not identify.

Responsibility: Keep the member registry in step with the upstream roster
"""

import asyncio
import logging

from ..adapters import MAX_SEARCH_PAGE_SIZE, HansardClient
from ..models import MemberRecord
from .contracts import MemberRegistry

logger = logging.getLogger(__name__)


class MemberSync:
    """
    Copies the upstream member roster into the registry.

    Example:
        total = await MemberSync(client, registry).sync_all_members()
    """

    def __init__(
        self,
        client: HansardClient,
        registry: MemberRegistry,
        page_size: int = MAX_SEARCH_PAGE_SIZE,
        page_delay_seconds: float = 1.0,
    ):
        self.client = client
        self.registry = registry
        self.page_size = page_size
        self.page_delay_seconds = page_delay_seconds

    async def sync_all_members(self) -> int:
        """
        Upsert every member returned by the search, page by page.

        Stops at the first empty page. Returns the number of search results
        processed.

        Raises:
            HansardAPIError: if a page cannot be fetched
        """
        skip = 0
        total_processed = 0

        try:
            while True:
                logger.info("Fetching members batch: skip=%s processed=%s", skip, total_processed)
                response = await self.client.search_members(
                    skip=skip,
                    take=self.page_size,
                    includeCurrent=True,
                    includeFormer=True,
                )
                results = response.get("Results")
                if not isinstance(results, list) or not results:
                    break

                members = [
                    MemberRecord.from_search_result(raw)
                    for raw in results
                    if isinstance(raw, dict) and raw.get("MemberId")
                ]
                await asyncio.gather(*(self.registry.upsert_member(m) for m in members))

                total_processed += len(results)
                skip += len(results)

                if self.page_delay_seconds > 0:
                    await asyncio.sleep(self.page_delay_seconds)
        except Exception as e:
            logger.error(f"Member sync failed: {e}")
            raise

        logger.info("Member sync completed: %s members processed", total_processed)
        return total_processed

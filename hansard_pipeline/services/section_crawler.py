"""
Section-tree crawler.

For one sitting day and chamber, fetches the list of sections and then each
section's tree, and flattens the trees into leaf record references. Section
trees are fetched in fixed-size concurrent batches with a pause between
batches.

Responsibility: Discover every leaf record published for a sitting day
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..adapters import HansardAPIError, HansardClient
from ..models import LeafRecordRef, SectionNode
from ..utils import gather_in_batches

logger = logging.getLogger(__name__)


@dataclass
class CrawlResult:
    """Leaves found for the sitting day a rewinding crawl settled on."""
    sitting_date: Optional[date] = None
    leaves_by_chamber: Dict[str, List[LeafRecordRef]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not any(self.leaves_by_chamber.values())

    def leaves(self, chambers: Optional[Iterable[str]] = None) -> List[LeafRecordRef]:
        """All leaves, chamber by chamber in the given (or stored) order."""
        names = list(chambers) if chambers is not None else list(self.leaves_by_chamber)
        return [
            leaf
            for name in names
            for leaf in self.leaves_by_chamber.get(name, [])
        ]


def iter_leaves(
    nodes: Iterable[SectionNode],
    parent_title: str = "",
) -> Iterator[Tuple[SectionNode, str]]:
    """
    Yield ``(leaf, parent_title)`` pairs in tree order.

    Leaves are not descended into; groups pass their own title down as the
    parent title of their descendants.
    """
    for node in nodes:
        if node.is_leaf:
            yield node, parent_title
        elif node.children:
            yield from iter_leaves(node.children, node.title)


class SectionTreeCrawler:
    """
    Crawls the section trees of a sitting day.

    Example:
        crawler = SectionTreeCrawler(client)
        leaves = await crawler.crawl(date(2024, 5, 23), "Commons")
    """

    def __init__(
        self,
        client: HansardClient,
        batch_size: int = 5,
        batch_delay_seconds: float = 1.0,
    ):
        self.client = client
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds

    async def crawl(self, sitting_date: date, chamber: str) -> List[LeafRecordRef]:
        """
        Leaf records for ``chamber`` on ``sitting_date``, in section order.

        Raises:
            HansardAPIError: if the section list itself cannot be fetched
        """
        sections = await self.client.get_sections_for_day(sitting_date, chamber)

        if not isinstance(sections, list):
            logger.warning(
                "Sections response for %s on %s is not an array: %r",
                chamber, sitting_date, sections,
            )
            return []

        logger.info(
            "Found %s sections for %s on %s", len(sections), chamber, sitting_date
        )

        async def crawl_one(section: Any) -> List[LeafRecordRef]:
            return await self._crawl_section(sitting_date, chamber, str(section))

        per_section = await gather_in_batches(
            sections,
            crawl_one,
            batch_size=self.batch_size,
            delay_seconds=self.batch_delay_seconds,
        )
        leaves = [leaf for section_leaves in per_section for leaf in section_leaves]

        logger.info(
            "Crawled %s leaf records for %s on %s", len(leaves), chamber, sitting_date
        )
        return leaves

    async def crawl_with_rewind(
        self,
        start_date: date,
        chambers: Sequence[str],
        max_days: int = 5,
    ) -> CrawlResult:
        """
        Crawl all ``chambers`` starting at ``start_date``, stepping back a day
        at a time until some chamber has records.

        Returns an empty result if nothing is found within ``max_days``
        attempts.
        """
        current = start_date

        for attempt in range(max_days):
            results = await asyncio.gather(
                *(self.crawl(current, chamber) for chamber in chambers)
            )
            leaves_by_chamber = dict(zip(chambers, results))

            if any(leaves_by_chamber.values()):
                logger.info(
                    "Found records for %s (%s)",
                    current,
                    ", ".join(f"{name}: {len(items)}" for name, items in leaves_by_chamber.items()),
                )
                return CrawlResult(sitting_date=current, leaves_by_chamber=leaves_by_chamber)

            logger.info("No records found for %s, trying previous day", current)
            current = current - timedelta(days=1)

        logger.warning(
            "No records found within %s days of %s", max_days, start_date
        )
        return CrawlResult()

    async def _crawl_section(
        self,
        sitting_date: date,
        chamber: str,
        section: str,
    ) -> List[LeafRecordRef]:
        try:
            tree = await self.client.get_section_tree(sitting_date, chamber, section)
        except HansardAPIError as e:
            logger.error(f"Error fetching section tree for {section} ({chamber}): {e}")
            return []

        if not isinstance(tree, list):
            logger.warning(
                "Section tree response for %s (%s) is not an array", section, chamber
            )
            return []

        nodes = [SectionNode.from_api(item) for item in tree if isinstance(item, dict)]
        return [
            LeafRecordRef(
                external_id=node.external_id,
                title=node.title or None,
                parent_title=parent_title,
                date=sitting_date,
                chamber=chamber,
                section=section,
            )
            for node, parent_title in iter_leaves(nodes)
        ]

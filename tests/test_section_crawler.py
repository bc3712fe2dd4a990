import asyncio
from datetime import date
from typing import Dict, List

import httpx
import pytest

from hansard_pipeline.services import SectionTreeCrawler
from hansard_pipeline.services.section_crawler import iter_leaves
from hansard_pipeline.models import SectionNode
from hansard_pipeline.utils import gather_in_batches

from conftest import make_client

SITTING_DAY = date(2024, 5, 23)

TREES: Dict[str, list] = {
    "Oral Answers": [
        {
            "Title": "Oral Answers to Questions",
            "ExternalId": None,
            "SectionTreeItems": [
                {"Title": "Health", "ExternalId": None, "SectionTreeItems": [
                    {"Title": "NHS Waiting Lists", "ExternalId": "OA1"},
                    {"Title": "Dentistry", "ExternalId": "OA2"},
                ]},
                {"Title": "Topical Questions", "ExternalId": "OA3"},
            ],
        }
    ],
    "Statements": [{"Title": "Flooding", "ExternalId": "ST1"}],
    "Debates": [
        {"Title": "Finance Bill", "ExternalId": "DB1", "SectionTreeItems": [
            {"Title": "Clause 1", "ExternalId": "DB1-1"},
        ]},
    ],
    "Petitions": [],
    "Written Statements": [{"Title": "Energy Update", "ExternalId": "WS1"}],
    "Business": [{"Title": "Business of the House", "ExternalId": "BH1"}],
}


def _handler(trees: Dict[str, list], sections_by_date: Dict[str, object], calls: List[str]):
    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if request.url.path == "/overview/sectionsforday.json":
            calls.append(f"sections:{params['date']}:{params['house']}")
            return httpx.Response(200, json=sections_by_date.get(params["date"], []))
        if request.url.path == "/overview/sectiontrees.json":
            section = params["section"]
            calls.append(f"tree:{section}")
            if section not in trees:
                return httpx.Response(500, json={"error": "boom"})
            return httpx.Response(200, json=trees[section])
        return httpx.Response(404)
    return handler


def _crawler(batch_size: int, sections_by_date=None, trees=TREES, calls=None) -> SectionTreeCrawler:
    sections_by_date = sections_by_date or {SITTING_DAY.isoformat(): list(trees)}
    client = make_client(_handler(trees, sections_by_date, calls if calls is not None else []))
    return SectionTreeCrawler(client, batch_size=batch_size, batch_delay_seconds=0)


@pytest.mark.parametrize("batch_size", [1, 2, 5, 10])
def test_crawl_finds_every_leaf_regardless_of_batch_size(batch_size) -> None:
    leaves = asyncio.run(_crawler(batch_size).crawl(SITTING_DAY, "Commons"))

    assert [leaf.external_id for leaf in leaves] == ["OA1", "OA2", "OA3", "ST1", "DB1", "WS1", "BH1"]
    assert all(leaf.chamber == "Commons" and leaf.date == SITTING_DAY for leaf in leaves)


def test_leaves_carry_nearest_group_title() -> None:
    leaves = asyncio.run(_crawler(5).crawl(SITTING_DAY, "Commons"))
    by_id = {leaf.external_id: leaf for leaf in leaves}

    assert by_id["OA1"].parent_title == "Health"
    assert by_id["OA3"].parent_title == "Oral Answers to Questions"
    assert by_id["ST1"].parent_title == ""
    assert by_id["OA1"].section == "Oral Answers"


def test_non_list_sections_response_is_empty() -> None:
    crawler = _crawler(5, sections_by_date={SITTING_DAY.isoformat(): {"message": "nope"}})

    assert asyncio.run(crawler.crawl(SITTING_DAY, "Commons")) == []


def test_failed_section_tree_yields_nothing_for_that_section() -> None:
    sections = {SITTING_DAY.isoformat(): ["Statements", "Missing", "Business"]}
    leaves = asyncio.run(_crawler(5, sections_by_date=sections).crawl(SITTING_DAY, "Lords"))

    assert [leaf.external_id for leaf in leaves] == ["ST1", "BH1"]


def test_rewind_steps_back_to_last_day_with_records() -> None:
    calls: List[str] = []
    sections = {"2024-05-21": ["Statements"]}
    crawler = _crawler(5, sections_by_date=sections, calls=calls)

    result = asyncio.run(
        crawler.crawl_with_rewind(SITTING_DAY, ["Commons", "Lords"], max_days=5)
    )

    assert result.sitting_date == date(2024, 5, 21)
    assert [leaf.external_id for leaf in result.leaves_by_chamber["Commons"]] == ["ST1"]
    assert [leaf.external_id for leaf in result.leaves(["Commons", "Lords"])] == ["ST1", "ST1"]
    assert "sections:2024-05-20:Commons" not in calls


def test_rewind_gives_up_after_max_days() -> None:
    calls: List[str] = []
    crawler = _crawler(5, sections_by_date={"2024-01-01": ["Statements"]}, calls=calls)

    result = asyncio.run(crawler.crawl_with_rewind(SITTING_DAY, ["Commons"], max_days=3))

    assert result.is_empty
    assert result.sitting_date is None
    assert calls == [
        "sections:2024-05-23:Commons",
        "sections:2024-05-22:Commons",
        "sections:2024-05-21:Commons",
    ]


def test_iter_leaves_does_not_descend_into_leaves() -> None:
    nodes = [SectionNode.from_api(item) for item in TREES["Debates"]]

    assert [(node.external_id, parent) for node, parent in iter_leaves(nodes)] == [("DB1", "")]


def test_batches_run_strictly_in_sequence() -> None:
    events: List[str] = []

    async def worker(item: int) -> int:
        events.append(f"start:{item}")
        await asyncio.sleep(0)
        events.append(f"end:{item}")
        return item * 10

    results = asyncio.run(gather_in_batches(list(range(5)), worker, batch_size=2, delay_seconds=0))

    assert results == [0, 10, 20, 30, 40]
    # every item of a batch finishes before the next batch starts
    assert events.index("end:0") < events.index("start:2")
    assert events.index("end:1") < events.index("start:2")
    assert events.index("end:3") < events.index("start:4")
    # items within a batch overlap
    assert events.index("start:1") < events.index("end:0")


def test_batch_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        asyncio.run(gather_in_batches([1], lambda item: asyncio.sleep(0), batch_size=0))

import asyncio
from datetime import date
from typing import Dict, List

import httpx

from hansard_pipeline.models import LeafRecordRef, MemberRecord
from hansard_pipeline.services import MemberResolver, PipelineRunContext, RecordEnricher
from hansard_pipeline.services.record_enricher import strip_markup

from conftest import FakeRegistry, make_client


def _body(items: List[dict], **overview) -> dict:
    return {
        "Overview": {
            "ExtId": overview.get("ExtId", "ABC123"),
            "Title": overview.get("Title", "Oral Answers"),
            "Date": "2024-05-23T00:00:00",
            "House": "Commons",
            "HRSTag": overview.get("HRSTag", "hs_8Question"),
            "Location": "Commons Chamber",
        },
        "Items": items,
        "ChildDebates": overview.get("ChildDebates", []),
    }


def _handler(bodies: Dict[str, object], calls: List[str], speakers=None):
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        calls.append(path)
        if path.startswith("/debates/speakerslist/"):
            return httpx.Response(200, json=speakers or [])
        ext_id = path.rsplit("/", 1)[-1].removesuffix(".json")
        if ext_id not in bodies:
            return httpx.Response(404, json={"error": "not found"})
        return httpx.Response(200, json=bodies[ext_id])
    return handler


def _leaf(external_id: str = "ABC123", title: str = "Oral Answers") -> LeafRecordRef:
    return LeafRecordRef(
        external_id=external_id,
        title=title,
        parent_title="Oral Answers to Questions",
        date=date(2024, 5, 23),
        chamber="Commons",
        section="Oral Answers",
    )


def _enricher(bodies, calls, registry=None, speakers=None) -> RecordEnricher:
    client = make_client(_handler(bodies, calls, speakers))
    return RecordEnricher(client, MemberResolver(registry or FakeRegistry()))


def test_oral_answers_end_to_end() -> None:
    calls: List[str] = []
    items = [{
        "MemberId": 4001,
        "AttributedTo": "Jane Doe (Anytown) (Lab)",
        "Value": "<p>Will the Minister <b>act</b>?</p>",
        "ItemType": "Contribution",
        "Timecode": "2024-05-23T11:32:07",
    }]
    speakers = [{"DisplayAs": "Jane Doe", "MemberId": 4001, "Party": "Lab", "MemberFrom": "Anytown"}]
    enricher = _enricher({"ABC123": _body(items)}, calls, speakers=speakers)

    record = asyncio.run(enricher.enrich(_leaf(), PipelineRunContext()))

    assert record.external_id == "ABC123"
    assert record.title == "Oral Answers"
    assert record.record_type == "Question"
    entry = record.entries[0]
    assert (entry.name, entry.constituency, entry.affiliation) == ("Jane Doe", "Anytown", "Labour")
    assert entry.value == "Will the Minister act?"
    assert record.speakers[0].affiliation == "Labour"
    assert record.speaker_names() == ["Jane Doe"]


def test_cached_record_is_returned_without_refetch() -> None:
    calls: List[str] = []
    items = [{"MemberId": 4001, "AttributedTo": "Jane Doe (Anytown) (Lab)", "Value": "Hello"}]
    enricher = _enricher({"ABC123": _body(items)}, calls)
    context = PipelineRunContext()

    async def enrich_twice():
        first = await enricher.enrich(_leaf(), context)
        second = await enricher.enrich(_leaf(), context)
        return first, second

    first, second = asyncio.run(enrich_twice())

    assert first is second
    assert calls.count("/debates/debate/ABC123.json") == 1
    assert "ABC123" in context.debate_cache


def test_bare_timestamps_are_dropped() -> None:
    calls: List[str] = []
    items = [
        {"MemberId": None, "Value": "14:32:07", "ItemType": "Timestamp"},
        {"MemberId": 4001, "AttributedTo": "Jane Doe (Anytown) (Lab)", "Value": "Hello"},
        {"MemberId": None, "Value": "Order. Order.", "ItemType": "Contribution"},
        {"MemberId": None, "Value": "Sitting suspended at 14:32:07"},
    ]
    enricher = _enricher({"ABC123": _body(items)}, calls)

    record = asyncio.run(enricher.enrich(_leaf(), PipelineRunContext()))

    assert [entry.value for entry in record.entries] == [
        "Hello",
        "Order. Order.",
        "Sitting suspended at 14:32:07",
    ]


def test_unidentified_members_are_backfilled_in_one_query() -> None:
    calls: List[str] = []
    registry = FakeRegistry(members=[
        MemberRecord(
            member_id=4002,
            display_name="John Roe",
            constituency="Elsewhere",
            affiliation="Con",
            department="Home Office",
        ),
    ])
    items = [
        {"MemberId": 4002, "Value": "First"},
        {"MemberId": 4003, "Value": "Unknown member"},
        {"MemberId": 4002, "Value": "Second"},
    ]
    enricher = _enricher({"ABC123": _body(items)}, calls, registry=registry)

    record = asyncio.run(enricher.enrich(_leaf(), PipelineRunContext()))

    assert registry.queries == [[4002, 4003]]
    first, unknown, second = record.entries
    assert (first.name, first.affiliation, first.role) == ("John Roe", "Conservative", "Home Office")
    assert second.name == "John Roe"
    assert unknown.name is None


def test_identity_seen_earlier_in_record_is_reused() -> None:
    calls: List[str] = []
    registry = FakeRegistry()
    items = [
        {"MemberId": 4001, "AttributedTo": "Jane Doe (Anytown) (Lab)", "Value": "Question"},
        {"MemberId": 4001, "Value": "Supplementary"},
    ]
    enricher = _enricher({"ABC123": _body(items)}, calls, registry=registry)

    record = asyncio.run(enricher.enrich(_leaf(), PipelineRunContext()))

    assert registry.queries == []
    assert record.entries[1].name == "Jane Doe"
    assert record.entries[1].constituency == "Anytown"


def test_registry_failure_leaves_entries_unresolved() -> None:
    calls: List[str] = []
    registry = FakeRegistry(fail=True)
    enricher = _enricher({"ABC123": _body([{"MemberId": 4002, "Value": "Hi"}])}, calls, registry=registry)

    record = asyncio.run(enricher.enrich(_leaf(), PipelineRunContext()))

    assert record is not None
    assert record.entries[0].member_id == 4002
    assert record.entries[0].name is None


def test_fetch_failure_is_recorded_on_context() -> None:
    calls: List[str] = []
    enricher = _enricher({}, calls)
    context = PipelineRunContext()

    record = asyncio.run(enricher.enrich(_leaf("MISSING"), context))

    assert record is None
    assert len(context.errors) == 1
    assert context.errors[0].context["external_id"] == "MISSING"
    assert context.errors[0].error_type == "HansardAPIError"
    assert context.errors[0].timestamp.tzinfo is not None
    assert "MISSING" not in context.debate_cache


def test_child_records_are_assembled() -> None:
    calls: List[str] = []
    child = {
        "Overview": {"ExtId": "CH1", "Title": "Dentistry", "Date": "2024-05-23", "House": "Commons"},
        "Items": [{"MemberId": 4001, "Value": "Follow-up"}],
        "ChildDebates": [],
    }
    items = [{"MemberId": 4001, "AttributedTo": "Jane Doe (Anytown) (Lab)", "Value": "Opening"}]
    enricher = _enricher({"ABC123": _body(items, ChildDebates=[child])}, calls)

    record = asyncio.run(enricher.enrich(_leaf(), PipelineRunContext()))

    assert [c.external_id for c in record.children] == ["CH1"]
    assert record.children[0].parent_title == "Oral Answers"
    assert record.children[0].entries[0].name == "Jane Doe"


def test_strip_markup() -> None:
    assert strip_markup("<p>Hello &amp; welcome</p>") == "Hello & welcome"
    assert strip_markup(" 14:32:07 ") == "14:32:07"
    assert strip_markup(None) is None


def test_timestamp_value_with_a_speaker_is_kept() -> None:
    calls: List[str] = []
    registry = FakeRegistry(members=[MemberRecord(member_id=4002, display_name="John Roe")])
    items = [
        {"AttributedTo": "Jane Doe", "Value": "14:32:07"},
        {"MemberId": 4002, "Value": "14:33:00"},
        {"MemberId": None, "Value": "14:32:07"},
    ]
    enricher = _enricher({"ABC123": _body(items)}, calls, registry=registry)

    record = asyncio.run(enricher.enrich(_leaf(), PipelineRunContext()))

    assert [(entry.name, entry.value) for entry in record.entries] == [
        ("Jane Doe", "14:32:07"),
        ("John Roe", "14:33:00"),
    ]

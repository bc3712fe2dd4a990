import asyncio
from datetime import date
from typing import Dict, List

import httpx
import pytest

from hansard_pipeline.services import SittingDateCache, SittingDateResolver
from hansard_pipeline.services.sitting_dates import parse_sitting_date

from conftest import make_client


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _resolver(answers: Dict[str, str], calls: List[str], clock: FakeClock) -> SittingDateResolver:
    def handler(request: httpx.Request) -> httpx.Response:
        house = request.url.params["house"]
        calls.append(house)
        return httpx.Response(200, text=answers[house])

    return SittingDateResolver(
        make_client(handler),
        SittingDateCache(ttl_seconds=1800, clock=clock),
    )


def test_latest_is_the_later_chamber_and_is_cached() -> None:
    calls: List[str] = []
    clock = FakeClock()
    resolver = _resolver(
        {"Commons": '"2024-05-22T00:00:00"', "Lords": '"2024-05-23T00:00:00"'}, calls, clock
    )

    async def resolve_twice():
        return (
            await resolver.resolve_last_sitting_date(),
            await resolver.resolve_last_sitting_date(),
        )

    first, second = asyncio.run(resolve_twice())

    assert first == second == date(2024, 5, 23)
    assert sorted(calls) == ["Commons", "Lords"]


def test_cache_expires_after_ttl() -> None:
    calls: List[str] = []
    clock = FakeClock()
    resolver = _resolver({"Commons": '"2024-05-23"'}, calls, clock)

    asyncio.run(resolver.resolve_last_sitting_date("Commons"))
    clock.now += 1799
    asyncio.run(resolver.resolve_last_sitting_date("Commons"))
    assert calls == ["Commons"]

    clock.now += 1
    asyncio.run(resolver.resolve_last_sitting_date("Commons"))
    assert calls == ["Commons", "Commons"]


def test_tie_returns_shared_date() -> None:
    calls: List[str] = []
    resolver = _resolver({"Commons": '"2024-05-23"', "Lords": '"2024-05-23"'}, calls, FakeClock())

    assert asyncio.run(resolver.resolve_last_sitting_date()) == date(2024, 5, 23)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('"2024-05-23T00:00:00"', date(2024, 5, 23)),
        ("2024-05-23", date(2024, 5, 23)),
        (' "2024-05-23T09:30:00Z" ', date(2024, 5, 23)),
    ],
)
def test_parse_sitting_date(raw, expected) -> None:
    assert parse_sitting_date(raw) == expected


def test_parse_sitting_date_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_sitting_date("not a date")

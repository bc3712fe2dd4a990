import asyncio
from typing import List

import httpx
import pytest

from hansard_pipeline.adapters import HansardAPIError
from hansard_pipeline.utils import calculate_backoff

from conftest import make_client


def _sequence_handler(statuses: List[int], calls: List[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        status = statuses[min(len(calls) - 1, len(statuses) - 1)]
        if status == 200:
            return httpx.Response(200, json={"ok": True})
        return httpx.Response(status, json={"error": status})
    return handler


def test_three_rate_limits_then_success() -> None:
    calls: List[httpx.Request] = []
    client = make_client(_sequence_handler([429, 429, 429, 200], calls))

    result = asyncio.run(client.fetch_json("/overview/sectionsforday.json"))

    assert result == {"ok": True}
    assert len(calls) == 4


def test_four_rate_limits_exhaust_retries() -> None:
    calls: List[httpx.Request] = []
    client = make_client(_sequence_handler([429, 429, 429, 429], calls))

    with pytest.raises(HansardAPIError) as exc_info:
        asyncio.run(client.fetch_json("/overview/sectionsforday.json"))

    assert len(calls) == 4
    assert exc_info.value.status_code == 429
    assert exc_info.value.retries_exhausted is True


def test_bad_request_is_retried() -> None:
    calls: List[httpx.Request] = []
    client = make_client(_sequence_handler([400, 200], calls))

    assert asyncio.run(client.fetch_json("/debates/debate/X.json")) == {"ok": True}
    assert len(calls) == 2


def test_server_error_fails_fast() -> None:
    calls: List[httpx.Request] = []
    client = make_client(_sequence_handler([500, 200], calls))

    with pytest.raises(HansardAPIError) as exc_info:
        asyncio.run(client.fetch_json("/debates/debate/X.json"))

    assert len(calls) == 1
    assert exc_info.value.status_code == 500
    assert exc_info.value.retries_exhausted is False


def test_transport_error_is_wrapped_without_retry() -> None:
    calls: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    with pytest.raises(HansardAPIError) as exc_info:
        asyncio.run(client.fetch_json("/overview/lastsittingdate.json"))

    assert len(calls) == 1
    assert exc_info.value.status_code is None


def test_backoff_grows_linearly() -> None:
    assert [calculate_backoff(attempt) for attempt in range(3)] == [1.0, 2.0, 3.0]
    assert calculate_backoff(1, base_delay=0.5) == 1.0


def test_last_sitting_date_strips_quotes() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/overview/lastsittingdate.json"
        assert request.url.params["house"] == "Lords"
        return httpx.Response(200, text='"2024-05-23T00:00:00"')

    client = make_client(handler)

    assert asyncio.run(client.get_last_sitting_date("Lords")) == "2024-05-23T00:00:00"


def test_search_members_caps_page_size_and_lowercases_flags() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"Results": []})

    client = make_client(handler)
    asyncio.run(client.search_members(skip=100, take=500, includeFormer=True, name="Jane"))

    params = seen[0].url.params
    assert params["take"] == "50"
    assert params["skip"] == "100"
    assert params["includeFormer"] == "true"
    assert params["name"] == "Jane"

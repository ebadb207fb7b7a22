"""Unit tests for DataLoader."""

import asyncio

import pytest

from coursedesk.exceptions import ApiTransportError
from coursedesk.loader import DataLoader
from coursedesk.table_view import TableView


@pytest.mark.asyncio
async def test_load_applies_transform():
    view = TableView("orders", "id")

    async def fetch():
        return [{"id": 1, "n": "a"}, {"id": 2, "n": "b"}]

    applied = await DataLoader(view, fetch, lambda item: {**item, "upper": item["n"].upper()}).load()

    assert applied
    assert view.loaded
    assert not view.loading
    assert [r["upper"] for r in view.records] == ["A", "B"]


@pytest.mark.asyncio
async def test_failed_load_keeps_current_list():
    view = TableView("orders", "id")
    view.load([{"id": 1}])

    async def fetch():
        raise ApiTransportError("/api/orders", "No response from server. Please try again.")

    assert not await DataLoader(view, fetch).load()
    assert [r["id"] for r in view.records] == [1]
    assert not view.loading


@pytest.mark.asyncio
async def test_first_load_failure_leaves_view_empty():
    view = TableView("orders", "id")

    async def fetch():
        raise ApiTransportError("/api/orders", "down")

    assert not await DataLoader(view, fetch).load()
    assert view.records == []
    assert not view.loaded


@pytest.mark.asyncio
async def test_malformed_payload_is_logged_not_raised(caplog):
    view = TableView("students", "user_uid")

    async def fetch():
        return [{"name": "no uid"}]

    assert not await DataLoader(view, fetch, lambda item: {"user_uid": item["user_uid"]}).load()
    assert "Malformed students payload" in caplog.text


@pytest.mark.asyncio
async def test_object_payload_is_rejected():
    view = TableView("users", "id")
    view.load([{"id": 1}])

    async def fetch():
        return {"data": [{"id": 2}], "total": 1}

    assert not await DataLoader(view, fetch).load()
    assert view.records == [{"id": 1}]
    assert not view.loading

    empty = TableView("users", "id")
    assert not await DataLoader(empty, fetch).load()
    assert empty.records == []
    assert not empty.loaded


@pytest.mark.asyncio
async def test_late_response_from_superseded_load_is_dropped():
    view = TableView("orders", "id")
    gate = asyncio.Event()

    async def slow_fetch():
        await gate.wait()
        return [{"id": "stale"}]

    async def fast_fetch():
        return [{"id": "fresh"}]

    slow = asyncio.ensure_future(DataLoader(view, slow_fetch).load())
    await asyncio.sleep(0)
    assert view.loading

    assert await DataLoader(view, fast_fetch).load()
    gate.set()

    assert not await slow
    assert [r["id"] for r in view.records] == ["fresh"]
    assert not view.loading

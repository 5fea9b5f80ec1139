"""Tests for NodeStore: per-parent cache with shared in-flight fetches."""

import asyncio

import pytest
import requests

from collection_tree.api import CatalogError
from collection_tree.core.tree.node_store import NodeStore
from collection_tree.models.node import FetchStatus
from tests.unit.fakes import FakeCatalog


def test_get_children_returns_catalog_order(store: NodeStore) -> None:
    children = asyncio.run(store.get_children(None))

    assert [c.id for c in children] == ["A", "D"]
    assert store.status(None) is FetchStatus.LOADED


def test_repeat_request_is_served_from_cache(store: NodeStore, catalog: FakeCatalog) -> None:
    """A parent is fetched at most once; later callers get the same result."""

    async def scenario() -> tuple:
        first = await store.get_children("A")
        second = await store.get_children("A")
        return first, second

    first, second = asyncio.run(scenario())

    assert first == second
    assert catalog.calls == ["A"]
    assert store.fetch_count == 1


def test_concurrent_requests_share_one_fetch(store: NodeStore, catalog: FakeCatalog) -> None:
    async def scenario() -> list:
        return await asyncio.gather(
            store.get_children(None),
            store.get_children(None),
            store.get_children(None),
        )

    results = asyncio.run(scenario())

    assert catalog.calls == [None]
    assert results[0] == results[1] == results[2]


def test_status_is_loading_while_fetch_in_flight(store: NodeStore, catalog: FakeCatalog) -> None:
    async def scenario() -> None:
        gate = catalog.hold("A")
        task = asyncio.ensure_future(store.get_children("A"))
        await asyncio.sleep(0)
        assert store.status("A") is FetchStatus.LOADING
        assert store.peek("A") is None
        gate.set()
        await task

    asyncio.run(scenario())

    assert store.status("A") is FetchStatus.LOADED


def test_fetch_failure_yields_empty_and_error_status(
    store: NodeStore, catalog: FakeCatalog
) -> None:
    catalog.fail("A", CatalogError("backend down"))

    children = asyncio.run(store.get_children("A"))

    assert children == ()
    entry = store.entry("A")
    assert entry.status is FetchStatus.ERROR
    assert entry.error == "backend down"


def test_network_errors_count_as_fetch_failures(store: NodeStore, catalog: FakeCatalog) -> None:
    catalog.fail(None, requests.ConnectionError("refused"))

    assert asyncio.run(store.get_children(None)) == ()
    assert store.status(None) is FetchStatus.ERROR


def test_failed_entry_is_refetched_on_next_request(
    store: NodeStore, catalog: FakeCatalog
) -> None:
    catalog.fail("A", CatalogError("backend down"))

    async def scenario() -> tuple:
        first = await store.get_children("A")
        catalog.recover("A")
        second = await store.get_children("A")
        return first, second

    first, second = asyncio.run(scenario())

    assert first == ()
    assert [c.id for c in second] == ["B"]
    assert catalog.calls == ["A", "A"]
    assert store.status("A") is FetchStatus.LOADED


def test_concurrent_requests_after_failure_share_one_refetch(
    store: NodeStore, catalog: FakeCatalog
) -> None:
    catalog.fail("A", CatalogError("backend down"))

    async def scenario() -> list:
        await store.get_children("A")
        catalog.recover("A")
        return await asyncio.gather(store.get_children("A"), store.get_children("A"))

    results = asyncio.run(scenario())

    assert results[0] == results[1]
    assert catalog.calls == ["A", "A"]


def test_retry_reissues_a_failed_fetch(store: NodeStore, catalog: FakeCatalog) -> None:
    catalog.fail("A", CatalogError("backend down"))

    async def scenario() -> tuple:
        await store.get_children("A")
        catalog.recover("A")
        return await store.retry("A")

    children = asyncio.run(scenario())

    assert [c.id for c in children] == ["B"]
    assert store.status("A") is FetchStatus.LOADED


def test_retry_on_loaded_entry_does_not_refetch(store: NodeStore, catalog: FakeCatalog) -> None:
    async def scenario() -> None:
        await store.get_children("A")
        await store.retry("A")

    asyncio.run(scenario())

    assert catalog.calls == ["A"]


def test_invalidate_forces_refetch(store: NodeStore, catalog: FakeCatalog) -> None:
    async def scenario() -> tuple:
        await store.get_children(None)
        catalog.tree[None].append(catalog.tree["D"][0])
        store.invalidate(None)
        return await store.get_children(None)

    children = asyncio.run(scenario())

    assert [c.id for c in children] == ["A", "D", "E"]
    assert catalog.calls == [None, None]


def test_invalidate_during_fetch_drops_its_result(store: NodeStore, catalog: FakeCatalog) -> None:
    async def scenario() -> None:
        gate = catalog.hold("A")
        task = asyncio.ensure_future(store.get_children("A"))
        while "A" not in catalog.calls:
            await asyncio.sleep(0)
        store.invalidate("A")
        gate.set()
        await task

    asyncio.run(scenario())

    assert store.status("A") is FetchStatus.NOT_REQUESTED
    assert store.peek("A") is None


def test_unexpected_errors_propagate(catalog: FakeCatalog) -> None:
    catalog.fail("A", ValueError("malformed payload"))
    store = NodeStore(catalog)

    with pytest.raises(ValueError, match="malformed"):
        asyncio.run(store.get_children("A"))

    assert store.status("A") is FetchStatus.NOT_REQUESTED


def test_has_children_is_unknown_until_loaded(store: NodeStore) -> None:
    assert store.has_children("A") is None

    async def scenario() -> None:
        await store.get_children("A")
        await store.get_children("C")

    asyncio.run(scenario())

    assert store.has_children("A") is True
    assert store.has_children("C") is False


def test_get_node_is_answered_from_loaded_levels(store: NodeStore, catalog: FakeCatalog) -> None:
    async def scenario() -> tuple:
        await store.get_children("A")
        return await store.get_node("B"), await store.get_node("D")

    b, d = asyncio.run(scenario())

    assert b is not None and b.parent_id == "A"
    assert d is not None and d.name == "Diecast"
    assert catalog.lookups == ["D"]


def test_concurrent_node_lookups_share_one_fetch(store: NodeStore, catalog: FakeCatalog) -> None:
    async def scenario() -> list:
        return await asyncio.gather(store.get_node("C"), store.get_node("C"))

    results = asyncio.run(scenario())

    assert results[0] == results[1]
    assert catalog.lookups == ["C"]

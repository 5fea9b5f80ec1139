"""Session-scoped cache of child collections, fetched one level at a time."""

import asyncio

import requests
from loguru import logger

from collection_tree.api import CatalogError
from collection_tree.models.node import CollectionNode, FetchStatus, StoreEntry
from collection_tree.protocols import CatalogProtocol

# Failures that mark an entry as ERROR. Anything else is a bug and propagates.
FETCH_ERRORS: tuple[type[Exception], ...] = (CatalogError, requests.RequestException, OSError)


class NodeStore:
    """Per-parent cache of child collections.

    One instance is shared by every tree view of a session. Entries are only
    ever added, except through :meth:`invalidate`. Concurrent requests for the
    same parent wait on a single in-flight fetch.
    """

    def __init__(self, catalog: CatalogProtocol) -> None:
        self._catalog = catalog
        self._entries: dict[str | None, StoreEntry] = {}
        self._inflight: dict[str | None, asyncio.Task[tuple[CollectionNode, ...]]] = {}
        self._nodes: dict[str, CollectionNode] = {}
        self._lookups: dict[str, asyncio.Task[CollectionNode | None]] = {}
        self.fetch_count = 0

    def entry(self, parent_id: str | None) -> StoreEntry:
        """Return the current snapshot for ``parent_id`` without fetching."""
        return self._entries.get(parent_id) or StoreEntry(parent_id=parent_id)

    def status(self, parent_id: str | None) -> FetchStatus:
        return self.entry(parent_id).status

    def peek(self, parent_id: str | None) -> tuple[CollectionNode, ...] | None:
        """Cached children, or None when they were never loaded."""
        entry = self._entries.get(parent_id)
        if entry is None or entry.status is not FetchStatus.LOADED:
            return None
        return entry.children

    def has_children(self, node_id: str | None) -> bool | None:
        """True/False once the node's children are loaded, None while unknown."""
        children = self.peek(node_id)
        return None if children is None else bool(children)

    async def get_children(self, parent_id: str | None) -> tuple[CollectionNode, ...]:
        """Return the children of ``parent_id``, fetching them on first use.

        A failed fetch yields ``()`` and leaves the entry in ERROR; the next
        request for that parent fetches it again.
        """
        entry = self._entries.get(parent_id)
        if entry is not None and entry.status is FetchStatus.LOADED:
            logger.debug("Filled from cache: {!r}", parent_id)
            return entry.children
        if entry is not None and entry.status is FetchStatus.ERROR:
            logger.debug("Refetching after failure: {!r}", parent_id)

        task = self._inflight.get(parent_id)
        if task is None:
            task = self._start(parent_id)
        # A waiter being cancelled must not cancel the fetch other waiters share.
        return await asyncio.shield(task)

    async def get_node(self, node_id: str) -> CollectionNode | None:
        """Return one collection with its parent id.

        Collections already seen in a loaded level are answered from memory.
        Otherwise the catalog is asked; an unknown id or a failed lookup gives
        None, and only a found collection is remembered.
        """
        known = self._nodes.get(node_id)
        if known is not None:
            return known
        task = self._lookups.get(node_id)
        if task is None:
            task = asyncio.ensure_future(self._lookup(node_id))
            self._lookups[node_id] = task
        return await asyncio.shield(task)

    async def retry(self, parent_id: str | None) -> tuple[CollectionNode, ...]:
        """Re-issue a failed fetch. A loaded or loading entry is left alone."""
        return await self.get_children(parent_id)

    def invalidate(self, parent_id: str | None) -> None:
        """Forget ``parent_id`` so the next request fetches it again.

        A fetch already in flight still completes, but its result is dropped.
        """
        self._entries.pop(parent_id, None)
        self._inflight.pop(parent_id, None)

    def _start(self, parent_id: str | None) -> asyncio.Task[tuple[CollectionNode, ...]]:
        self._entries[parent_id] = StoreEntry(parent_id=parent_id, status=FetchStatus.LOADING)
        task = asyncio.ensure_future(self._fetch(parent_id))
        self._inflight[parent_id] = task
        return task

    async def _fetch(self, parent_id: str | None) -> tuple[CollectionNode, ...]:
        self.fetch_count += 1
        this_task = asyncio.current_task()
        logger.debug("Fetching children of {!r}", parent_id)
        try:
            children = tuple(await self._catalog.fetch_children(parent_id))
        except FETCH_ERRORS as e:
            logger.warning("Failed to load children of {!r}: {}", parent_id, e)
            self._settle(
                parent_id,
                this_task,
                StoreEntry(parent_id=parent_id, status=FetchStatus.ERROR, error=str(e)),
            )
            return ()
        except BaseException:
            self._settle(parent_id, this_task, None)
            raise

        self._settle(
            parent_id,
            this_task,
            StoreEntry(parent_id=parent_id, status=FetchStatus.LOADED, children=children),
        )
        self._nodes.update((child.id, child) for child in children)
        return children

    async def _lookup(self, node_id: str) -> CollectionNode | None:
        self.fetch_count += 1
        logger.debug("Looking up collection {!r}", node_id)
        try:
            found = await self._catalog.fetch_collection(node_id)
        except FETCH_ERRORS as e:
            logger.warning("Failed to look up collection {!r}: {}", node_id, e)
            return None
        finally:
            self._lookups.pop(node_id, None)
        if found is not None:
            self._nodes[found.id] = found
        return found

    def _settle(
        self,
        parent_id: str | None,
        task: asyncio.Task | None,
        entry: StoreEntry | None,
    ) -> None:
        # Invalidated while in flight: the result belongs to nobody.
        if self._inflight.get(parent_id) is not task:
            return
        del self._inflight[parent_id]
        if entry is None:
            self._entries.pop(parent_id, None)
        else:
            self._entries[parent_id] = entry

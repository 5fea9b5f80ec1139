"""Protocols for dependency injection in the tree engine."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from collection_tree.models.node import CollectionNode


@runtime_checkable
class CatalogProtocol(Protocol):
    """Protocol for catalog clients that list child collections."""

    async def fetch_children(self, parent_id: str | None) -> Sequence[CollectionNode]:
        """Return the direct child collections of ``parent_id`` (None = top level)."""
        ...

    async def fetch_collection(self, node_id: str) -> CollectionNode | None:
        """Return a single collection with its parent id, or None if unknown."""
        ...

"""Catalog GraphQL client."""

import asyncio
import os
from typing import Any

import requests
from loguru import logger

from collection_tree.config import API_TOKEN_ENV, API_TOKEN_FILES, API_URL, REQUEST_TIMEOUT
from collection_tree.models.node import CollectionNode

MY_COLLECTION_TREE = """\
query GetMyCollectionTree($parentId: ID) {
  myCollectionTree(parent_id: $parentId) {
    collections {
      id
      name
      parent_collection_id
      item_count
    }
  }
}
"""

CURRENT_COLLECTION = """\
query GetCurrentCollection($parentId: ID) {
  myCollectionTree(parent_id: $parentId) {
    current_collection {
      id
      name
      parent_collection_id
      item_count
    }
  }
}
"""


class CatalogError(RuntimeError):
    """The catalog answered, but reported a failure."""


class CatalogApi:
    """Encapsulated catalog API."""

    def __init__(self, *, api_url: str | None = None, token: str | None = None) -> None:
        self.api_url = api_url or API_URL
        self.sess = requests.Session()

        token_name: str | None = None
        if token is not None:
            self.api_token = token
            token_name = "argument"
        elif os.environ.get(API_TOKEN_ENV):
            self.api_token = os.environ[API_TOKEN_ENV].strip()
            token_name = API_TOKEN_ENV
        else:
            for token_path in API_TOKEN_FILES:
                try:
                    self.api_token = token_path.read_text(encoding="utf-8").strip()
                    token_name = str(token_path)
                    break
                except FileNotFoundError:
                    pass
            else:
                msg = f"Cannot find catalog token file, was looking at {API_TOKEN_FILES!r}"
                raise RuntimeError(msg)

        logger.debug("API ready: url {!r}, token from {!r}", self.api_url, token_name)

    def call(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run a GraphQL operation, return its ``data`` object."""
        logger.debug("Making request: {}", repr(variables)[:64])

        r = self.sess.post(
            self.api_url,
            json={"query": query, "variables": variables},
            headers={"Authorization": f"Bearer {self.api_token}"},
            timeout=REQUEST_TIMEOUT,
        )
        r.raise_for_status()
        rv: dict[str, Any] = r.json()
        if rv.get("errors"):
            messages = "; ".join(str(e.get("message", e)) for e in rv["errors"])
            msg = f"API call failed: ({variables!r}) -> {messages}"
            raise CatalogError(msg)
        data = rv.get("data")
        if not isinstance(data, dict):
            msg = f"API call returned no data: ({variables!r})"
            raise CatalogError(msg)
        return data

    def list_children(self, parent_id: str | None) -> list[CollectionNode]:
        """Fetch the direct children of ``parent_id`` synchronously."""
        data = self.call(MY_COLLECTION_TREE, {"parentId": parent_id})
        tree = data.get("myCollectionTree") or {}
        return [_to_node(raw, parent_id) for raw in tree.get("collections") or []]

    async def fetch_children(self, parent_id: str | None) -> list[CollectionNode]:
        """Fetch children without blocking the event loop."""
        return await asyncio.to_thread(self.list_children, parent_id)

    def get_collection(self, node_id: str) -> CollectionNode | None:
        """Fetch one collection, including its parent id, synchronously."""
        data = self.call(CURRENT_COLLECTION, {"parentId": node_id})
        raw = (data.get("myCollectionTree") or {}).get("current_collection")
        if not raw:
            return None
        return _to_node(raw, None)

    async def fetch_collection(self, node_id: str) -> CollectionNode | None:
        return await asyncio.to_thread(self.get_collection, node_id)


def _to_node(raw: dict[str, Any], parent_id: str | None) -> CollectionNode:
    parent = raw.get("parent_collection_id", parent_id)
    return CollectionNode(
        id=str(raw["id"]),
        name=raw.get("name") or "",
        parent_id=None if parent is None else str(parent),
        item_count=int(raw.get("item_count") or 0),
    )

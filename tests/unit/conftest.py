"""Shared test fixtures."""

import sys
from collections.abc import Iterator

import pytest
from loguru import logger

from collection_tree.core.tree.node_store import NodeStore
from tests.unit.fakes import TREE, FakeCatalog


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop sinks bound to streams captured during a test."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def catalog() -> FakeCatalog:
    """Return a fake catalog serving TREE."""
    return FakeCatalog({k: list(v) for k, v in TREE.items()})


@pytest.fixture
def store(catalog: FakeCatalog) -> NodeStore:
    """Return an empty node store backed by the fake catalog."""
    return NodeStore(catalog)

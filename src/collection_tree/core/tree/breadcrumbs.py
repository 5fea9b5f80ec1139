"""Breadcrumbs: the chain of collections above a collection."""

from loguru import logger

from collection_tree.config import MAX_RESOLVE_VISITS
from collection_tree.core.tree.node_store import NodeStore
from collection_tree.models.node import ROOT_ID, Breadcrumb, CollectionNode


async def get_breadcrumbs(
    store: NodeStore,
    node_id: str | None,
    *,
    max_visits: int = MAX_RESOLVE_VISITS,
) -> tuple[Breadcrumb, ...] | None:
    """Get ancestor breadcrumbs for a collection by following parent ids upward.

    Returns breadcrumbs in order from the top level down to the immediate
    parent (excludes the collection itself). The root and top-level
    collections have none. Returns None when the chain cannot be followed:
    the id is unknown, a lookup failed, or the parents loop.
    """
    if node_id is ROOT_ID:
        return ()

    current = await store.get_node(node_id)
    if current is None:
        logger.debug("No breadcrumbs for {!r}: collection not found", node_id)
        return None

    chain: list[CollectionNode] = []
    seen = {current.id}
    while current.parent_id:
        if len(seen) > max_visits:
            logger.warning("Gave up on breadcrumbs for {!r} after {} lookups", node_id, max_visits)
            return None
        parent = await store.get_node(current.parent_id)
        if parent is None:
            logger.debug("Breadcrumbs for {!r} broken at {!r}", node_id, current.parent_id)
            return None
        if parent.id in seen:
            logger.warning("Parent cycle above {!r} at {!r}", node_id, parent.id)
            return None
        seen.add(parent.id)
        chain.append(parent)
        current = parent

    chain.reverse()
    return tuple(
        Breadcrumb(node_id=n.id, name=n.name, depth=depth) for depth, n in enumerate(chain, 1)
    )

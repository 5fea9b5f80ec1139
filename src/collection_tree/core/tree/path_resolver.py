"""Ancestor path resolution: which collections to open so a target becomes visible."""

from loguru import logger

from collection_tree.config import MAX_RESOLVE_VISITS
from collection_tree.core.tree.node_store import NodeStore
from collection_tree.models.node import ROOT_ID


async def resolve_path(
    store: NodeStore,
    target_id: str | None,
    *,
    max_visits: int = MAX_RESOLVE_VISITS,
) -> list[str] | None:
    """Find the ancestor ids of ``target_id``, from the top level down.

    The walk is depth-first in catalog order: a level's children are checked
    for the target, then the first child's subtree is searched completely
    before its next sibling. Levels are fetched one at a time through the
    store, so cached levels cost nothing.

    Args:
        store: Node store used to fetch each level.
        target_id: The collection to locate. None (the root) resolves to [].
        max_visits: Safety bound on the number of levels fetched.

    Returns:
        Ancestor ids excluding the target itself ([] for a top-level target),
        or None when the target is not reachable. A level that fails to load
        counts as empty; a collection seen twice ends the walk with None.
    """
    if target_id is ROOT_ID:
        return []

    # Stack of (node id, ancestors of node id) frames.
    todo: list[tuple[str | None, list[str]]] = [(ROOT_ID, [])]
    visited: set[str | None] = set()

    while todo:
        node_id, path = todo.pop()
        if node_id in visited:
            logger.warning("Cycle at {!r} while resolving {!r}, giving up", node_id, target_id)
            return None
        if len(visited) >= max_visits:
            logger.warning("Visited {} collections resolving {!r}, giving up", max_visits, target_id)
            return None
        visited.add(node_id)

        children = await store.get_children(node_id)
        if any(child.id == target_id for child in children):
            logger.debug("Resolved {!r} under {!r}", target_id, path)
            return path

        # Reversed so the first child is popped (and searched) first.
        todo.extend((child.id, [*path, child.id]) for child in reversed(children))

    logger.debug("Collection {!r} not found in tree", target_id)
    return None


def expand_ids_for(path: list[str] | None) -> frozenset[str]:
    """Collections to auto-expand for a resolved path.

    "Not found" and "already at the top level" are treated alike: nothing is
    expanded beyond the root.
    """
    return frozenset(path or ())

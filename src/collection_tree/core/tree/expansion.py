"""Per-view expansion state: manual toggles and path-driven auto-expansion."""

from collections.abc import Iterable
from enum import Enum

from loguru import logger

from collection_tree.core.tree.node_store import NodeStore
from collection_tree.core.tree.path_resolver import resolve_path
from collection_tree.models.node import CollectionNode, ExpansionState, FetchStatus


class NodePhase(Enum):
    COLLAPSED = "collapsed"
    EXPANDING = "expanding"
    EXPANDED = "expanded"


class TreeExpansionController:
    """Expansion state of the nodes of one tree view.

    A node becomes EXPANDED only once its children fetch has settled; a failed
    fetch still expands it, with no children. Once the user toggles a node,
    path-driven expansion never touches that node again. Creating a new
    controller (a remount) forgets all of this.
    """

    def __init__(self, store: NodeStore) -> None:
        self.store = store
        self._states: dict[str, ExpansionState] = {}
        self._loading: set[str] = set()
        # Bumped on every open/close of a node; a fetch finishing under an
        # older token no longer decides that node's state.
        self._tokens: dict[str, int] = {}
        self._counter = 0
        self._generation = 0

    def state_of(self, node_id: str) -> ExpansionState:
        state = self._states.get(node_id)
        if state is None:
            state = self._states[node_id] = ExpansionState()
        return state

    def phase(self, node_id: str) -> NodePhase:
        if node_id in self._loading:
            return NodePhase.EXPANDING
        if self.state_of(node_id).expanded:
            return NodePhase.EXPANDED
        return NodePhase.COLLAPSED

    def is_expanded(self, node_id: str) -> bool:
        return self.phase(node_id) is NodePhase.EXPANDED

    def is_loading(self, node_id: str) -> bool:
        return node_id in self._loading

    def is_manual(self, node_id: str) -> bool:
        state = self._states.get(node_id)
        return state is not None and state.manually_toggled

    def expanded_ids(self) -> frozenset[str]:
        return frozenset(n for n, s in self._states.items() if s.expanded)

    def children_of(self, node_id: str) -> tuple[CollectionNode, ...]:
        """Loaded children of an expanded node; empty when none or failed."""
        return self.store.peek(node_id) or ()

    def failed(self, node_id: str) -> bool:
        return self.store.status(node_id) is FetchStatus.ERROR

    async def toggle(self, node_id: str) -> bool:
        """Flip a node on behalf of the user; return whether it ends up expanded."""
        state = self.state_of(node_id)
        state.manually_toggled = True
        if state.expanded or node_id in self._loading:
            self._bump(node_id)
            state.expanded = False
            self._loading.discard(node_id)
            return False
        await self._open(node_id)
        return self.is_expanded(node_id)

    async def auto_expand(self, node_ids: Iterable[str]) -> None:
        """Expand each node in order, skipping nodes the user has toggled."""
        await self._auto_expand(node_ids, generation=None)

    async def expand_to(self, target_id: str | None) -> list[str] | None:
        """Resolve the ancestors of ``target_id`` and expand them.

        Calling this again before an earlier call finishes supersedes it: the
        earlier path is dropped, though fetches it started still fill the cache.

        Returns:
            The ancestor path that was applied, or None when the target was not
            found or the call was superseded.
        """
        self._generation += 1
        generation = self._generation

        path = await resolve_path(self.store, target_id)
        if generation != self._generation:
            logger.debug("Dropping stale path for {!r}", target_id)
            return None
        if path:
            await self._auto_expand(path, generation=generation)
        return path

    def reset(self) -> None:
        """Forget all expansion state, as on remount."""
        self._states.clear()
        self._loading.clear()
        self._tokens.clear()
        self._generation += 1

    async def _auto_expand(self, node_ids: Iterable[str], *, generation: int | None) -> None:
        for node_id in node_ids:
            if generation is not None and generation != self._generation:
                logger.debug("Auto-expansion superseded before {!r}", node_id)
                return
            state = self.state_of(node_id)
            if state.manually_toggled:
                logger.debug("Not auto-expanding {!r}: toggled by user", node_id)
                continue
            if not state.expanded and node_id not in self._loading:
                await self._open(node_id)

    async def _open(self, node_id: str) -> None:
        token = self._bump(node_id)
        if self.store.peek(node_id) is None:
            self._loading.add(node_id)
            try:
                await self.store.get_children(node_id)
            finally:
                if self._tokens.get(node_id) == token:
                    self._loading.discard(node_id)
        if self._tokens.get(node_id) == token:
            self.state_of(node_id).expanded = True

    def _bump(self, node_id: str) -> int:
        self._counter += 1
        self._tokens[node_id] = self._counter
        return self._counter

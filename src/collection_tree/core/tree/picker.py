"""Collection picker: a tree view where choosing a collection also opens it."""

from collections.abc import Callable

from loguru import logger

from collection_tree.core.tree.expansion import TreeExpansionController
from collection_tree.core.tree.node_store import NodeStore
from collection_tree.models.node import ROOT_ID, CollectionNode, FetchStatus, TreeRow


class CollectionPicker:
    """Pick a destination collection from a lazily loaded tree.

    The root ("My Collection") is a selectable row of its own. ``exclude_id``
    hides one collection together with its subtree, e.g. the collection being
    moved.
    """

    def __init__(
        self,
        store: NodeStore,
        *,
        on_select: Callable[[str | None], None] | None = None,
        exclude_id: str | None = None,
        selected_id: str | None = None,
    ) -> None:
        self.store = store
        self.expansion = TreeExpansionController(store)
        self.on_select = on_select
        self.exclude_id = exclude_id
        self.selected_id = selected_id
        self.root_expanded = True

    async def load(self) -> tuple[CollectionNode, ...]:
        """Fetch the top level."""
        await self.store.get_children(ROOT_ID)
        return self.nodes_at(ROOT_ID)

    async def open(self, default_id: str | None = None) -> list[str] | None:
        """Prepare for first paint with ``default_id`` selected and revealed."""
        self.selected_id = default_id
        self.root_expanded = True
        await self.load()
        if default_id is None:
            return []
        return await self.expansion.expand_to(default_id)

    def nodes_at(self, parent_id: str | None) -> tuple[CollectionNode, ...]:
        """Visible children of ``parent_id`` that are already loaded."""
        children = self.store.peek(parent_id) or ()
        return tuple(c for c in children if c.id != self.exclude_id)

    def is_expanded(self, node_id: str | None) -> bool:
        if node_id is ROOT_ID:
            return self.root_expanded
        return self.expansion.is_expanded(node_id)

    def is_loading(self, node_id: str | None) -> bool:
        if node_id is ROOT_ID:
            return self.store.status(ROOT_ID) is FetchStatus.LOADING
        return self.expansion.is_loading(node_id)

    def root_failed(self) -> bool:
        return self.store.status(ROOT_ID) is FetchStatus.ERROR

    async def toggle(self, node_id: str | None) -> bool:
        if node_id is ROOT_ID:
            if self.root_expanded:
                self.root_expanded = False
            else:
                await self._unfold_root()
            return self.root_expanded
        return await self.expansion.toggle(node_id)

    async def select(self, node_id: str | None) -> None:
        """Choose ``node_id``.

        Choosing a collection reports it and toggles it open or closed.
        Choosing the root when it is already chosen only folds or unfolds it;
        otherwise it is chosen and unfolded.
        """
        if node_id is not ROOT_ID and node_id == self.exclude_id:
            logger.debug("Ignoring selection of excluded collection {!r}", node_id)
            return

        if node_id is ROOT_ID:
            if self.selected_id is ROOT_ID and self.root_expanded:
                self.root_expanded = False
            else:
                if self.selected_id is not ROOT_ID:
                    self._report(ROOT_ID)
                await self._unfold_root()
            return

        self._report(node_id)
        await self.expansion.toggle(node_id)

    def rows(self) -> list[TreeRow]:
        """Visible rows in display order. Top-level collections are at depth 1."""
        if not self.root_expanded:
            return []

        rows: list[TreeRow] = []
        seen: set[str] = set()
        todo: list[tuple[int, CollectionNode]] = [
            (1, node) for node in reversed(self.nodes_at(ROOT_ID))
        ]
        while todo:
            depth, node = todo.pop()
            expanded = self.expansion.is_expanded(node.id)
            loaded = self.store.peek(node.id)
            rows.append(
                TreeRow(
                    depth=depth,
                    node=node,
                    expanded=expanded,
                    loading=self.expansion.is_loading(node.id),
                    selected=node.id == self.selected_id,
                    has_children=None if loaded is None else bool(self.nodes_at(node.id)),
                    children_failed=self.expansion.failed(node.id),
                )
            )
            if expanded and node.id not in seen:
                seen.add(node.id)
                todo.extend((depth + 1, child) for child in reversed(self.nodes_at(node.id)))
        return rows

    async def _unfold_root(self) -> None:
        self.root_expanded = True
        # A failed top level is fetched again when the root is reopened.
        if self.root_failed():
            await self.load()

    def _report(self, node_id: str | None) -> None:
        self.selected_id = node_id
        if self.on_select is not None:
            self.on_select(node_id)

"""Multi-selection that only ever holds one kind of item."""

from collections.abc import Callable

from loguru import logger

from collection_tree.models.node import SelectionState

_IDLE = SelectionState()


class SelectionCoordinator:
    """Idle, or active with a kind and a non-empty set of ids.

    Toggling an id of another kind while active is ignored. Removing the last
    id returns to idle.
    """

    def __init__(self, *, on_complete: Callable[[], None] | None = None) -> None:
        self._state = _IDLE
        self.on_complete = on_complete

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state.active

    @property
    def kind(self) -> str | None:
        return self._state.kind

    @property
    def count(self) -> int:
        return len(self._state.ids)

    @property
    def ids(self) -> list[str]:
        """Selected ids, in no particular order."""
        return list(self._state.ids)

    def is_selected(self, item_id: str) -> bool:
        return item_id in self._state.ids

    def is_disabled(self, kind: str) -> bool:
        """Whether items of ``kind`` cannot join the current selection."""
        return self._state.active and self._state.kind != kind

    def enter(self, item_id: str, kind: str) -> None:
        """Start a fresh selection holding only ``item_id``."""
        self._state = SelectionState(active=True, kind=kind, ids=frozenset({item_id}))

    def toggle(self, item_id: str, kind: str) -> None:
        state = self._state
        if not state.active:
            self.enter(item_id, kind)
            return

        if state.kind != kind:
            logger.debug("Ignoring {!r} of kind {!r}: selection holds {!r}", item_id, kind, state.kind)
            return

        ids = state.ids - {item_id} if item_id in state.ids else state.ids | {item_id}
        self._state = SelectionState(active=True, kind=kind, ids=ids) if ids else _IDLE

    def exit(self) -> None:
        self._state = _IDLE

    def complete(self, callback: Callable[[list[str]], None] | None = None) -> None:
        """Hand the selected ids to ``callback``, then leave selection mode."""
        if callback is not None:
            callback(self.ids)
        self.exit()
        if self.on_complete is not None:
            self.on_complete()

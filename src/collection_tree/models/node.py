"""Domain models for the collection tree."""

from dataclasses import dataclass
from enum import Enum

# The synthetic top level. It is never fetched as a node itself.
ROOT_ID = None


class FetchStatus(Enum):
    """Lifecycle of one Node Store entry."""

    NOT_REQUESTED = "not-requested"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class CollectionNode:
    """A collection as returned by the catalog. Immutable snapshot."""

    id: str
    name: str
    parent_id: str | None = None
    item_count: int = 0


@dataclass(frozen=True)
class StoreEntry:
    """Cached children of one parent, plus how the fetch went."""

    parent_id: str | None
    status: FetchStatus = FetchStatus.NOT_REQUESTED
    children: tuple[CollectionNode, ...] = ()
    error: str | None = None


@dataclass
class ExpansionState:
    """Per-node expansion state owned by a single tree view."""

    expanded: bool = False
    manually_toggled: bool = False


@dataclass(frozen=True)
class SelectionState:
    """Snapshot of a multi-selection."""

    active: bool = False
    kind: str | None = None
    ids: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Entry:
    """An owned entry (item, wishlist row) pointing at a catalog entity."""

    id: str
    entity_id: str | None
    created_at: float
    name: str = ""
    kind: str = "owned"


@dataclass(frozen=True)
class GroupedEntry:
    """An entry standing in for every entry that shares its entity."""

    entry: Entry
    is_duplicate: bool = False
    duplicate_count: int = 1
    duplicate_group: tuple[Entry, ...] | None = None

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def entity_id(self) -> str | None:
        return self.entry.entity_id


@dataclass(frozen=True)
class TreeRow:
    """A visible row of a rendered tree."""

    depth: int
    node: CollectionNode
    expanded: bool = False
    loading: bool = False
    selected: bool = False
    has_children: bool | None = None
    children_failed: bool = False


@dataclass(frozen=True)
class Breadcrumb:
    """A single ancestor in a breadcrumb trail."""

    node_id: str
    name: str
    depth: int

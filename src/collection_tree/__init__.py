"""Lazy collection tree, multi-selection and duplicate grouping."""

from collection_tree.api import CatalogApi, CatalogError
from collection_tree.core.grouping.duplicates import ExpandedGroups, group_duplicates
from collection_tree.core.selection.coordinator import SelectionCoordinator
from collection_tree.core.tree.breadcrumbs import get_breadcrumbs
from collection_tree.core.tree.expansion import NodePhase, TreeExpansionController
from collection_tree.core.tree.node_store import NodeStore
from collection_tree.core.tree.path_resolver import expand_ids_for, resolve_path
from collection_tree.core.tree.picker import CollectionPicker
from collection_tree.protocols import CatalogProtocol

__all__ = [
    "CatalogApi",
    "CatalogError",
    "CatalogProtocol",
    "CollectionPicker",
    "ExpandedGroups",
    "NodePhase",
    "NodeStore",
    "SelectionCoordinator",
    "TreeExpansionController",
    "expand_ids_for",
    "get_breadcrumbs",
    "group_duplicates",
    "resolve_path",
]

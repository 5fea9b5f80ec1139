"""Collapse entries that point at the same catalog entity."""

from collections.abc import Iterable, Sequence

from collection_tree.models.node import Entry, GroupedEntry


def group_duplicates(entries: Iterable[Entry], enabled: bool) -> list[GroupedEntry]:
    """Group entries by the catalog entity they reference.

    Args:
        entries: Flat list of entries, e.g. one collection's items.
        enabled: When False every entry is passed through as its own group.

    Returns:
        One GroupedEntry per entity, in order of first appearance. The
        representative is the earliest-created entry (input order breaks ties);
        ``duplicate_group`` lists all members, oldest first, when there is more
        than one. Entries without an entity id are keyed by their own id, and
        entries with neither are never grouped.
    """
    if not enabled:
        return [GroupedEntry(entry=e) for e in entries]

    groups: dict[object, list[Entry]] = {}
    for index, entry in enumerate(entries):
        key: object = entry.entity_id or entry.id or ("_no_entity", index)
        groups.setdefault(key, []).append(entry)

    result = []
    for members in groups.values():
        ordered = tuple(sorted(members, key=lambda e: e.created_at))
        count = len(ordered)
        result.append(
            GroupedEntry(
                entry=ordered[0],
                is_duplicate=count > 1,
                duplicate_count=count,
                duplicate_group=ordered if count > 1 else None,
            )
        )
    return result


class ExpandedGroups:
    """Which duplicate groups a list view currently shows unfolded.

    Keyed by the representative's id. Owned by the list view, not the grouper.
    """

    def __init__(self) -> None:
        self._ids: set[str] = set()

    def toggle(self, representative_id: str) -> bool:
        if representative_id in self._ids:
            self._ids.discard(representative_id)
            return False
        self._ids.add(representative_id)
        return True

    def is_expanded(self, representative_id: str) -> bool:
        return representative_id in self._ids

    def clear(self) -> None:
        self._ids.clear()

    def visible(self, grouped: Sequence[GroupedEntry]) -> list[Entry]:
        """Entries to display: an unfolded group shows all of its members."""
        rows: list[Entry] = []
        for group in grouped:
            if group.duplicate_group and self.is_expanded(group.id):
                rows.extend(group.duplicate_group)
            else:
                rows.append(group.entry)
        return rows

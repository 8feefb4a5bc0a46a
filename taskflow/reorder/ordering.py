"""Positional-integer math for drag-reorderable collections.

Everything here is pure: functions take a ``Snapshot`` and return a new one,
so the caller can keep the old snapshot around for rollback.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from operator import attrgetter
from typing import Any, Dict, Iterable, List


@dataclass(frozen=True)
class OrderedItem:
    """A task, column or board as seen by the reorder logic"""
    id: Any
    container_id: Any
    position: int
    data: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def moved(self, container_id, position):
        return replace(self, container_id=container_id, position=position)


class Snapshot(Mapping):
    """Immutable ``id -> OrderedItem`` mapping plus the known containers.

    Containers are tracked separately so that an empty column is still a
    valid drop target.
    """

    def __init__(self, items: Iterable[OrderedItem] = (), containers: Iterable[Any] = ()):
        self._items = {item.id: item for item in items}
        order = list(containers)
        for item in self._items.values():
            if item.container_id not in order:
                order.append(item.container_id)
        self._containers = tuple(order)

    def __getitem__(self, item_id):
        return self._items[item_id]

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __eq__(self, other):
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self.positions() == other.positions() and \
            set(self._containers) == set(other._containers)

    def __hash__(self):
        return hash(frozenset(self.positions().items()))

    def __repr__(self):
        return f'<Snapshot {len(self._items)} items in {len(self._containers)} containers>'

    @property
    def containers(self):
        return self._containers

    def has_container(self, container_id):
        return container_id in self._containers

    def positions(self):
        """``id -> (container_id, position)``, handy for comparisons"""
        return {item.id: (item.container_id, item.position) for item in self._items.values()}

    def with_items(self, items: Iterable[OrderedItem]) -> 'Snapshot':
        merged = dict(self._items)
        for item in items:
            merged[item.id] = item
        return Snapshot(merged.values(), self._containers)

    def without(self, item_id) -> 'Snapshot':
        return Snapshot((i for i in self._items.values() if i.id != item_id), self._containers)


def siblings(snapshot, container_id, exclude=None) -> List[OrderedItem]:
    """Items of a container in display order, optionally minus one item.

    Ties on position (transient optimistic state) break on id, the same
    order the server uses.
    """
    items = [item for item in snapshot.values()
             if item.container_id == container_id and item.id != exclude]
    return sorted(items, key=attrgetter('position', 'id'))


def rank(snapshot, item_id) -> int:
    """Zero-based display index of an item inside its own container"""
    item = snapshot[item_id]
    ids = [sibling.id for sibling in siblings(snapshot, item.container_id)]
    return ids.index(item_id)


def next_position(snapshot, container_id) -> int:
    items = siblings(snapshot, container_id)
    if not items:
        return 0
    return items[-1].position + 1


def drop_position(snapshot, item_id, container_id, anchor_id=None) -> int:
    """Final integer position for a drop into ``container_id``.

    Dropping on an anchor puts the item at the anchor's index among the
    other items of the container; no anchor means the end of the container.
    Dropping an item on itself keeps its current index.
    """
    if anchor_id is not None and anchor_id == item_id:
        item = snapshot[item_id]
        if item.container_id == container_id:
            return rank(snapshot, item_id)
    others = siblings(snapshot, container_id, exclude=item_id)
    if anchor_id is not None:
        for index, other in enumerate(others):
            if other.id == anchor_id:
                return index
    return len(others)


def move_item(snapshot, item_id, container_id, position) -> Snapshot:
    """Move a single item without touching its siblings.

    Positions in both containers may temporarily collide or skip; the
    server's answer replaces them.
    """
    item = snapshot[item_id]
    return snapshot.with_items([item.moved(container_id, position)])


def renumber(snapshot, container_id, ordered_ids=None) -> Snapshot:
    """Assign consecutive positions 0..N-1 inside a container"""
    if ordered_ids is None:
        ordered_ids = [item.id for item in siblings(snapshot, container_id)]
    updated = [snapshot[item_id].moved(container_id, index)
               for index, item_id in enumerate(ordered_ids)]
    return snapshot.with_items(updated)


def insert_at(snapshot, item_id, container_id, position) -> Snapshot:
    """Move an item to ``position`` and renumber source and target containers.

    ``position`` is clamped to ``[0, len(target siblings)]``.
    """
    item = snapshot[item_id]
    source_id = item.container_id
    target_ids = [other.id for other in siblings(snapshot, container_id, exclude=item_id)]
    position = max(0, min(position, len(target_ids)))
    target_ids.insert(position, item_id)

    moved = snapshot.with_items([item.moved(container_id, position)])
    if source_id != container_id:
        moved = renumber(moved, source_id)
    return renumber(moved, container_id, target_ids)


def array_move(ids, old_index, new_index) -> list:
    ids = list(ids)
    ids.insert(new_index, ids.pop(old_index))
    return ids


def is_contiguous(snapshot, container_id) -> bool:
    positions = [item.position for item in siblings(snapshot, container_id)]
    return positions == list(range(len(positions)))


def snapshot_from_records(records, container_key, containers=(), id_key='id') -> Snapshot:
    """Build a snapshot from JSON-shaped records (e.g. ``Task.to_dict()``)"""
    return Snapshot((item_from_record(record, container_key, id_key) for record in records),
                    containers)


def item_from_record(record, container_key, id_key='id') -> OrderedItem:
    return OrderedItem(
        id=record[id_key],
        container_id=record[container_key],
        position=record['position'],
        data=dict(record)
    )


def group_by_container(snapshot) -> Dict[Any, List[OrderedItem]]:
    return {container_id: siblings(snapshot, container_id)
            for container_id in snapshot.containers}

"""Persistence collaborators for the reorder controller."""
import logging
import threading
from typing import Any, List, Protocol, Sequence

from taskflow.errors import NotFoundError, ValidationError
from taskflow.reorder.ordering import OrderedItem, Snapshot, insert_at, renumber, siblings

logger = logging.getLogger(__name__)


class PositionStore(Protocol):
    """What the reorder controller needs from the server.

    Implementations raise ``NotFoundError`` when the item or container is
    missing or not accessible, ``ValidationError`` on malformed input and
    ``NetworkError`` on transport failures.
    """

    def update_item_position(self, item_id: Any, container_id: Any, position: int) -> OrderedItem:
        """Move one item; returns the item as the server now sees it"""
        ...

    def list_items_by_container(self, container_id: Any) -> List[OrderedItem]:
        """All items of a container, ascending by position"""
        ...


class BatchPositionStore(PositionStore, Protocol):

    def reorder_container(self, container_id: Any, ordered_ids: Sequence[Any]) -> List[OrderedItem]:
        """Write every sibling's position in one atomic step"""
        ...


def supports_batch(store) -> bool:
    return callable(getattr(store, 'reorder_container', None))


def validate_position(position):
    if isinstance(position, bool) or not isinstance(position, int) or position < 0:
        raise ValidationError('Position must be a non-negative integer')


class InMemoryPositionStore:
    """Server stand-in that keeps canonical 0..N-1 positions.

    Writes are serialized with a lock and applied in arrival order, so
    overlapping writes are last-write-wins. ``calls`` records every request.
    """

    def __init__(self, snapshot: Snapshot):
        self._snapshot = snapshot
        self._lock = threading.Lock()
        self._failures = []
        self._item_failures = {}
        self.calls = []

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def fail_next(self, error, times=1):
        self._failures.extend([error] * times)

    def fail_for(self, item_id, error):
        self._item_failures[item_id] = error

    def _check_failure(self, item_id=None):
        if self._failures:
            raise self._failures.pop(0)
        if item_id in self._item_failures:
            raise self._item_failures[item_id]

    def update_item_position(self, item_id, container_id, position):
        with self._lock:
            self.calls.append(('update_item_position', item_id, container_id, position))
            self._check_failure(item_id)
            validate_position(position)
            if item_id not in self._snapshot:
                raise NotFoundError(f'Item {item_id} not found')
            if not self._snapshot.has_container(container_id):
                raise NotFoundError(f'Container {container_id} not found')
            self._snapshot = insert_at(self._snapshot, item_id, container_id, position)
            logger.debug('Stored item %s at %s/%s', item_id, container_id, position)
            return self._snapshot[item_id]

    def list_items_by_container(self, container_id):
        with self._lock:
            self.calls.append(('list_items_by_container', container_id))
            self._check_failure()
            if not self._snapshot.has_container(container_id):
                raise NotFoundError(f'Container {container_id} not found')
            return siblings(self._snapshot, container_id)

    @property
    def network_calls(self):
        return len(self.calls)


class AtomicInMemoryPositionStore(InMemoryPositionStore):
    """Adds the all-or-nothing container endpoint"""

    def reorder_container(self, container_id, ordered_ids):
        with self._lock:
            self.calls.append(('reorder_container', container_id, list(ordered_ids)))
            self._check_failure()
            if not self._snapshot.has_container(container_id):
                raise NotFoundError(f'Container {container_id} not found')
            current = {item.id for item in siblings(self._snapshot, container_id)}
            if len(ordered_ids) != len(current) or set(ordered_ids) != current:
                raise ValidationError('Order must list every item of the container exactly once')
            self._snapshot = renumber(self._snapshot, container_id, list(ordered_ids))
            return siblings(self._snapshot, container_id)

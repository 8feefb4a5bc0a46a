"""Optimistic drag-and-drop reordering.

The controller owns a ``BoardState`` whose snapshot is replaced, never
mutated, so rolling back a failed drop is just putting the pre-drag snapshot
back. Persistence goes through a ``PositionStore``; the server's answer is
authoritative once a write succeeds.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, List, NamedTuple, Optional

from taskflow.errors import DragInProgressError, TaskflowError, ValidationError
from taskflow.reorder.ordering import (
    OrderedItem, Snapshot, array_move, drop_position, insert_at, rank, renumber, siblings
)
from taskflow.reorder.store import supports_batch

logger = logging.getLogger(__name__)

COMMITTED = 'committed'
NOOP = 'noop'
CANCELLED = 'cancelled'
ROLLED_BACK = 'rolled_back'
DISCARDED = 'discarded'

KEYBOARD_DIRECTIONS = ('up', 'down', 'left', 'right')


class Replace(NamedTuple):
    snapshot: Snapshot


class Place(NamedTuple):
    item_id: Any
    container_id: Any
    position: int


class ReplaceContainer(NamedTuple):
    container_id: Any
    items: List[OrderedItem]


def reduce(snapshot, action):
    """Apply one action to a snapshot and return the new snapshot"""
    if isinstance(action, Replace):
        return action.snapshot
    if isinstance(action, Place):
        return insert_at(snapshot, action.item_id, action.container_id, action.position)
    if isinstance(action, ReplaceContainer):
        fresh_ids = {item.id for item in action.items}
        kept = [item for item in snapshot.values()
                if item.container_id != action.container_id and item.id not in fresh_ids]
        return Snapshot(kept + list(action.items), snapshot.containers)
    raise TypeError(f'Unknown action {action!r}')


class BoardState:
    """The client's local mirror of a board"""

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot
        self._listeners = []

    def dispatch(self, action) -> Snapshot:
        self.snapshot = reduce(self.snapshot, action)
        for listener in list(self._listeners):
            listener(self.snapshot)
        return self.snapshot

    def subscribe(self, listener: Callable[[Snapshot], None]):
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)


@dataclass
class DropResult:
    status: str
    item_id: Any
    container_id: Any = None
    position: Optional[int] = None
    error: Optional[TaskflowError] = None

    @property
    def ok(self):
        return self.status in (COMMITTED, NOOP)


class _Drag(NamedTuple):
    item_id: Any
    snapshot: Snapshot


def _log_notification(message, error=None):
    logger.warning(message)


class ReorderController:
    """Drag lifecycle for one board: begin, hover, drop, persist, reconcile"""

    def __init__(self, state, store, notify=None, max_workers=4):
        if isinstance(state, Snapshot):
            state = BoardState(state)
        self.state = state
        self.store = store
        self.notify = notify or _log_notification
        self.max_workers = max_workers
        self._drag = None
        self._closed = False

    @property
    def snapshot(self) -> Snapshot:
        return self.state.snapshot

    @property
    def dragging(self):
        return self._drag.item_id if self._drag else None

    def begin_drag(self, item_id):
        if self._drag is not None:
            raise DragInProgressError()
        if item_id not in self.snapshot:
            raise ValidationError(f'Unknown item {item_id!r}')
        self._drag = _Drag(item_id, self.snapshot)
        logger.debug('Drag started for %r', item_id)

    def drag_over(self, item_id, target_container_id, target_anchor_id=None) -> Snapshot:
        """Move the dragged item visually; nothing is persisted"""
        self._active(item_id)
        current = self.snapshot
        if not current.has_container(target_container_id):
            return current
        position = drop_position(current, item_id, target_container_id, target_anchor_id)
        item = current[item_id]
        if item.container_id == target_container_id and rank(current, item_id) == position:
            return current
        return self.state.dispatch(Place(item_id, target_container_id, position))

    def end_drag(self, item_id, final_container_id=None, final_anchor_id=None) -> DropResult:
        drag = self._active(item_id)
        self._drag = None
        before = drag.snapshot

        if final_container_id is None or not before.has_container(final_container_id):
            self.state.dispatch(Replace(before))
            logger.debug('Drop of %r outside any target, restored', item_id)
            return DropResult(CANCELLED, item_id)

        position = drop_position(before, item_id, final_container_id, final_anchor_id)
        source_id = before[item_id].container_id
        if source_id == final_container_id and rank(before, item_id) == position:
            self.state.dispatch(Replace(before))
            return DropResult(NOOP, item_id, final_container_id, position)

        self.state.dispatch(Replace(insert_at(before, item_id, final_container_id, position)))

        try:
            self.store.update_item_position(item_id, final_container_id, position)
        except TaskflowError as error:
            return self._rollback(before, item_id, error, 'Could not move the task')

        if self._closed:
            return DropResult(DISCARDED, item_id, final_container_id, position)

        logger.info('Moved %r to %r at %d', item_id, final_container_id, position)
        self._reconcile([source_id, final_container_id])
        return DropResult(COMMITTED, item_id, final_container_id, position)

    def reorder_container(self, item_id, anchor_id=None) -> DropResult:
        """Reorder a whole container (columns of a board, boards of a project).

        The dragged item takes the anchor's index, every sibling is renumbered
        0..N-1 and the whole order is persisted. Any failure restores the
        pre-drag snapshot.
        """
        if self._drag is not None:
            raise DragInProgressError()
        if item_id not in self.snapshot:
            raise ValidationError(f'Unknown item {item_id!r}')

        before = self.snapshot
        container_id = before[item_id].container_id
        ordered = [item.id for item in siblings(before, container_id)]
        if anchor_id is not None and anchor_id not in ordered:
            raise ValidationError(f'{anchor_id!r} is not in the same container')

        old_index = ordered.index(item_id)
        new_index = ordered.index(anchor_id) if anchor_id is not None else len(ordered) - 1
        if old_index == new_index:
            return DropResult(NOOP, item_id, container_id, old_index)

        ordered = array_move(ordered, old_index, new_index)
        self.state.dispatch(Replace(renumber(before, container_id, ordered)))

        batch = supports_batch(self.store)
        try:
            if batch:
                items = self.store.reorder_container(container_id, ordered)
            else:
                self._persist_each(container_id, ordered)
        except TaskflowError as error:
            return self._rollback(before, item_id, error, 'Could not update the order')

        if self._closed:
            return DropResult(DISCARDED, item_id, container_id, new_index)

        if batch:
            self.state.dispatch(ReplaceContainer(container_id, items))
        else:
            self._reconcile([container_id])
        logger.info('Reordered container %r, %r now at %d', container_id, item_id, new_index)
        return DropResult(COMMITTED, item_id, container_id, new_index)

    def move_by_keyboard(self, item_id, direction) -> DropResult:
        """Accessibility path; goes through the same begin/over/end steps"""
        if direction not in KEYBOARD_DIRECTIONS:
            raise ValidationError(f'Unknown direction {direction!r}')
        snapshot = self.snapshot
        if item_id not in snapshot:
            raise ValidationError(f'Unknown item {item_id!r}')

        item = snapshot[item_id]
        current = rank(snapshot, item_id)
        others = siblings(snapshot, item.container_id, exclude=item_id)

        if direction == 'up':
            if current == 0:
                return DropResult(NOOP, item_id, item.container_id, current)
            target, anchor = item.container_id, others[current - 1].id
        elif direction == 'down':
            if current >= len(others):
                return DropResult(NOOP, item_id, item.container_id, current)
            target = item.container_id
            anchor = others[current + 1].id if current + 1 < len(others) else None
        else:
            containers = list(snapshot.containers)
            index = containers.index(item.container_id) + (1 if direction == 'right' else -1)
            if index < 0 or index >= len(containers):
                return DropResult(NOOP, item_id, item.container_id, current)
            target = containers[index]
            target_items = siblings(snapshot, target)
            anchor = target_items[current].id if current < len(target_items) else None

        self.begin_drag(item_id)
        self.drag_over(item_id, target, anchor)
        return self.end_drag(item_id, target, anchor)

    def move_container_by_keyboard(self, item_id, direction) -> DropResult:
        if direction not in KEYBOARD_DIRECTIONS:
            raise ValidationError(f'Unknown direction {direction!r}')
        if item_id not in self.snapshot:
            raise ValidationError(f'Unknown item {item_id!r}')
        item = self.snapshot[item_id]
        ordered = [sibling.id for sibling in siblings(self.snapshot, item.container_id)]
        index = ordered.index(item_id) + (1 if direction in ('down', 'right') else -1)
        if index < 0 or index >= len(ordered):
            return DropResult(NOOP, item_id, item.container_id, ordered.index(item_id))
        return self.reorder_container(item_id, ordered[index])

    def discard(self):
        """Unmount: results of writes still in flight are dropped"""
        self._closed = True
        self._drag = None

    def _active(self, item_id) -> _Drag:
        if self._drag is None or self._drag.item_id != item_id:
            raise ValidationError(f'{item_id!r} is not being dragged')
        return self._drag

    def _rollback(self, before, item_id, error, message):
        if self._closed:
            return DropResult(DISCARDED, item_id, error=error)
        self.state.dispatch(Replace(before))
        logger.warning('%s %r, rolled back: %s', message, item_id, error)
        self.notify(f'{message}: {error.message}', error)
        return DropResult(ROLLED_BACK, item_id, error=error)

    def _persist_each(self, container_id, ordered):
        # No server-side transaction here: a partial failure leaves the
        # server with a mixed order even though the client rolls back.
        first_error = None
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self.store.update_item_position, item_id, container_id, position)
                       for position, item_id in enumerate(ordered)]
            for future in futures:
                try:
                    future.result()
                except TaskflowError as error:
                    first_error = first_error or error
        if first_error is not None:
            raise first_error

    def _reconcile(self, container_ids):
        seen = []
        for container_id in container_ids:
            if container_id in seen:
                continue
            seen.append(container_id)
            try:
                items = self.store.list_items_by_container(container_id)
            except TaskflowError as error:
                logger.warning('Could not refresh container %r: %s', container_id, error)
                continue
            self.state.dispatch(ReplaceContainer(container_id, items))

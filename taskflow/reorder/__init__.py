from .ordering import OrderedItem, Snapshot
from .controller import BoardState, DropResult, ReorderController
from .gatekeeper import DragSensor, Element, Gatekeeper, PointerDispatcher, TargetKind, classify
from .store import AtomicInMemoryPositionStore, InMemoryPositionStore, PositionStore

__all__ = [
    'OrderedItem', 'Snapshot',
    'BoardState', 'DropResult', 'ReorderController',
    'DragSensor', 'Element', 'Gatekeeper', 'PointerDispatcher', 'TargetKind', 'classify',
    'AtomicInMemoryPositionStore', 'InMemoryPositionStore', 'PositionStore',
]

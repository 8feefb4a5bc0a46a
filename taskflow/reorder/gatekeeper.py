"""Keeps the drag sensor from swallowing ordinary clicks.

The drag library listens for pointer-down on the whole document. The
gatekeeper runs first (capture phase), classifies the event target and
decides whether the sensor may see the event at all.
"""
import enum
import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

INTERACTIVE_TAGS = frozenset(['a', 'button', 'input', 'select', 'textarea'])
NO_DND_ATTR = 'data-no-dnd'
BOARD_ATTR = 'data-board-container'
ITEM_ATTR = 'data-item-id'


class Element:
    """Just enough of a DOM node to ask about ancestry"""

    def __init__(self, tag, attrs=None, parent=None, on_click=None):
        self.tag = tag.lower()
        self.attrs: Dict[str, Any] = dict(attrs or {})
        self.parent: Optional['Element'] = None
        self.children = []
        self.on_click = on_click
        if parent is not None:
            parent.append(self)

    def append(self, child: 'Element') -> 'Element':
        child.parent = self
        self.children.append(child)
        return child

    def add(self, tag, attrs=None, on_click=None) -> 'Element':
        return Element(tag, attrs, parent=self, on_click=on_click)

    def has_attr(self, name):
        return name in self.attrs

    def ancestors(self):
        """Yields the element itself, then every parent up to the root"""
        node = self
        while node is not None:
            yield node
            node = node.parent

    def closest(self, predicate: Callable[['Element'], bool]) -> Optional['Element']:
        for node in self.ancestors():
            if predicate(node):
                return node
        return None

    def contains(self, other: Optional['Element']) -> bool:
        if other is None:
            return False
        return any(node is self for node in other.ancestors())

    def __repr__(self):
        return f'<Element {self.tag} {self.attrs}>'


class TargetKind(enum.Enum):
    INSIDE_BOARD = 'inside_board'
    INTERACTIVE_CONTROL = 'interactive_control'
    OUTSIDE_CHROME = 'outside_chrome'


def is_interactive(element):
    return element.tag in INTERACTIVE_TAGS or element.has_attr(NO_DND_ATTR)


def classify(target, board_region) -> TargetKind:
    """Interactive controls win over the board region, wherever they live"""
    if target is None:
        return TargetKind.OUTSIDE_CHROME
    if target.closest(is_interactive) is not None:
        return TargetKind.INTERACTIVE_CONTROL
    if board_region is not None and board_region.contains(target):
        return TargetKind.INSIDE_BOARD
    return TargetKind.OUTSIDE_CHROME


class PointerEvent:

    def __init__(self, target, type='pointerdown'):
        self.target = target
        self.type = type
        self.default_prevented = False
        self.propagation_stopped = False
        self.drag_blocked = False

    def stop_immediate_propagation(self):
        self.propagation_stopped = True

    def prevent_default(self):
        self.default_prevented = True


class PointerDispatcher:
    """Document-level listeners: capture phase first, then bubble phase.

    ``press`` delivers a pointer-down and then, unless the default was
    prevented, the click on the nearest element with a click handler.
    """

    def __init__(self):
        self._capture = []
        self._bubble = []

    def add_listener(self, listener, capture=False):
        (self._capture if capture else self._bubble).append(listener)
        return lambda: self.remove_listener(listener)

    def remove_listener(self, listener):
        for listeners in (self._capture, self._bubble):
            if listener in listeners:
                listeners.remove(listener)

    def dispatch(self, event):
        for listener in self._capture + self._bubble:
            if event.propagation_stopped:
                break
            listener(event)
        return event

    def press(self, target):
        event = self.dispatch(PointerEvent(target))
        if not event.default_prevented and target is not None:
            clickable = target.closest(lambda node: node.on_click is not None)
            if clickable is not None:
                clickable.on_click(event)
        return event


class Gatekeeper:
    """Capture-phase pointer-down filter for one board region.

    Stateless: every event is classified from scratch.
    """

    def __init__(self, board_region: Optional[Element]):
        self.board_region = board_region

    def install(self, dispatcher):
        return dispatcher.add_listener(self.on_pointer_down, capture=True)

    def on_pointer_down(self, event) -> Optional[TargetKind]:
        # No board on this page: nothing to protect
        if self.board_region is None:
            return None
        kind = classify(event.target, self.board_region)
        if kind is TargetKind.INTERACTIVE_CONTROL:
            event.drag_blocked = True
        elif kind is TargetKind.OUTSIDE_CHROME:
            event.stop_immediate_propagation()
        return kind


class DragSensor:
    """Bubble-phase listener that starts drags on a reorder controller"""

    def __init__(self, controller):
        self.controller = controller
        self.activations = 0

    def install(self, dispatcher):
        return dispatcher.add_listener(self, capture=False)

    def __call__(self, event):
        if event.drag_blocked or event.target is None:
            return
        draggable = event.target.closest(lambda node: node.has_attr(ITEM_ATTR))
        if draggable is None or self.controller.dragging is not None:
            return
        self.controller.begin_drag(draggable.attrs[ITEM_ATTR])
        self.activations += 1
        logger.debug('Drag sensor activated on %r', draggable)

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .config import DRAG_RADIUS_FACTOR, HIT_TOLERANCE, POINT_RADIUS
from .rendering import Renderer, Style
from .viewport import Viewport


class PointerButton(Enum):
    LEFT = 0
    MIDDLE = 1
    RIGHT = 2


@dataclass(frozen=True, slots=True)
class PointerState:
    down: bool = False
    x: float = 0.0
    y: float = 0.0
    button: Optional[PointerButton] = None


class ArrayOwner(Protocol):
    viewport: Viewport

    def value_at(self, index: int) -> float: ...

    def commit_value(self, index: int, value: float) -> float: ...

    def format_value(self, value: float) -> str: ...


# ===========================================================================
# Interactive element base
# ===========================================================================

class Interactive(ABC):
    """Something that can claim a press gesture and follow it until release."""

    @abstractmethod
    def hit(self, x: float, y: float) -> bool:
        raise NotImplementedError

    @abstractmethod
    def press(self, pointer: PointerState) -> Interactive:
        """Claim the gesture; returns the element that follows it until release."""
        raise NotImplementedError

    def drag(self, pointer: PointerState) -> None:
        return None

    def release(self, pointer: PointerState) -> None:
        return None

    def cancel(self) -> None:
        """Abandon the gesture without applying the pointer."""
        return None


class Handle(Interactive):
    """Round handle shared by value points and fitting points."""

    def __init__(self, radius: float = POINT_RADIUS) -> None:
        self._base_radius = radius
        self.radius = radius
        self.pressed = False
        self.anchor: Optional[tuple[float, float]] = None

    @abstractmethod
    def position(self) -> tuple[float, float]:
        raise NotImplementedError

    def hit(self, x: float, y: float) -> bool:
        px, py = self.position()
        return math.hypot(x - px, y - py) <= self.radius + HIT_TOLERANCE

    def press(self, pointer: PointerState) -> Interactive:
        px, py = self.position()
        self.pressed = True
        self.anchor = (pointer.x - px, pointer.y - py)
        self.radius = self._base_radius * DRAG_RADIUS_FACTOR
        self.drag(pointer)
        return self

    def target(self, pointer: PointerState) -> tuple[float, float]:
        """Where the handle centre goes for this pointer, keeping the grab offset."""
        if self.anchor is None:
            return pointer.x, pointer.y
        return pointer.x - self.anchor[0], pointer.y - self.anchor[1]

    def release(self, pointer: PointerState) -> None:
        if not self.pressed:
            return
        self.drag(pointer)
        self.cancel()

    def cancel(self) -> None:
        self.pressed = False
        self.anchor = None
        self.radius = self._base_radius


# ===========================================================================
# Value point
# ===========================================================================

class ValuePoint(Handle):
    """Draggable handle for one array element; drags change only the value."""

    def __init__(self, index: int, owner: ArrayOwner) -> None:
        super().__init__()
        self.index = index
        self._owner = owner

    def __repr__(self) -> str:
        return f"ValuePoint({self.index})"

    def position(self) -> tuple[float, float]:
        vp = self._owner.viewport
        return vp.index_to_x(self.index), vp.value_to_y(self._owner.value_at(self.index))

    def drag(self, pointer: PointerState) -> None:
        if not self.pressed:
            return
        _, y = self.target(pointer)
        value = self._owner.viewport.y_to_value(y)
        self._owner.commit_value(self.index, value)

    def render(self, renderer: Renderer, hovered: bool) -> None:
        x, y = self.position()
        renderer.circle(x, y, self.radius, Style.VALUE_POINT)
        if hovered or self.pressed:
            label = self._owner.format_value(self._owner.value_at(self.index))
            renderer.text(x + self.radius * 2.0, y - self.radius * 2.0, label, Style.VALUE_LABEL)

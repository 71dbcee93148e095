"""Two-handle range selector: pointer drags to clamped, step-quantized ranges.

Each drag runs in its own ``DragSession`` whose move/release closures are
dropped on release, so repeated drags never accumulate listeners.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

OnChange = Callable[[float, float], None]


class Handle(str, Enum):
    MIN = "min"
    MAX = "max"


class DragSession:
    """One pointer-down to pointer-up interaction on a handle."""

    def __init__(
        self,
        selector: RangeSelector,
        handle: Handle,
        start_x: float,
        track_width: float,
    ):
        self.handle = handle
        self.start_x = start_x
        self.track_width = track_width
        self.start_value = selector.values[0] if handle is Handle.MIN else selector.values[1]
        self._selector: Optional[RangeSelector] = selector

    @property
    def active(self) -> bool:
        return self._selector is not None

    def move(self, pointer_x: float) -> tuple[float, float] | None:
        """Apply a pointer-move; returns the new values, or None once released."""
        selector = self._selector
        if selector is None or self.track_width <= 0:
            return None

        percentage_moved = (pointer_x - self.start_x) / self.track_width
        value_moved = (selector.max - selector.min) * percentage_moved
        new_value = round((self.start_value + value_moved) / selector.step) * selector.step
        new_value = max(selector.min, min(selector.max, new_value))

        low, high = selector.values
        if self.handle is Handle.MIN:
            low = min(new_value, high - selector.step)
        else:
            high = max(new_value, low + selector.step)

        selector._commit(low, high)
        return selector.values

    def release(self) -> None:
        selector = self._selector
        self._selector = None
        if selector is not None and selector._drag is self:
            selector._drag = None


class RangeSelector:
    """Controlled/uncontrolled ``[min, max]`` range input.

    Invariant: ``min <= values[0] <= values[1] - step`` and
    ``values[0] + step <= values[1] <= max`` after any drag.
    """

    def __init__(
        self,
        min: float = 0,
        max: float = 100,
        step: float = 1,
        value: tuple[float, float] | None = None,
        on_change: OnChange | None = None,
    ):
        if step <= 0:
            raise ValueError("step must be positive")
        if max - min < step:
            raise ValueError("range must span at least one step")
        self.min = min
        self.max = max
        self.step = step
        self.on_change = on_change
        self.values: tuple[float, float] = (min, max)
        self._drag: DragSession | None = None
        if value is not None:
            self.set_value(value)

    @property
    def dragging(self) -> bool:
        return self._drag is not None

    def set_value(self, value: tuple[float, float]) -> None:
        """Overwrite internal state from an external value.

        Ignored while a drag is in progress.
        """
        if self._drag is not None:
            logger.debug("Ignoring external range value during drag: %s", value)
            return
        self.values = (value[0], value[1])

    def begin_drag(self, handle: Handle | str, pointer_x: float, track_width: float) -> DragSession:
        """Start dragging *handle*; any unreleased previous drag is released first."""
        if self._drag is not None:
            self._drag.release()
        self._drag = DragSession(self, Handle(handle), pointer_x, track_width)
        return self._drag

    def percentage(self, value: float) -> float:
        """Track position of *value* as a percentage, for rendering."""
        return (value - self.min) / (self.max - self.min) * 100

    def _commit(self, low: float, high: float) -> None:
        self.values = (_tidy(low), _tidy(high))
        if self.on_change is not None:
            self.on_change(*self.values)


def _tidy(value: float) -> float:
    # Undo float noise from step multiplication (e.g. 0.1 * 3)
    rounded = round(value, 6)
    return int(rounded) if float(rounded).is_integer() else rounded


def format_value(value: float) -> str:
    """Compact label: thousands shown as ``12.5k``."""
    if value >= 1000:
        scaled = value / 1000
        return f"{_tidy(scaled)}k"
    return str(_tidy(value))

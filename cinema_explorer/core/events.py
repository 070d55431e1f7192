"""
Typed publish/subscribe channels for the events views listen to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
Handler = Callable[[T], None]


class EventChannel(Generic[T]):
    """
    One named event with a fixed payload type.

    Handlers are called synchronously, in subscription order. A handler that
    raises does not stop the others; the error is logged and re-raised once
    all handlers have run.
    """

    def __init__(self, name: str):
        self.name = name
        self._handlers: List[Handler] = []

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        """Register a handler and return a function that unregisters it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def emit(self, payload: T) -> None:
        first_error: Optional[Exception] = None
        for handler in list(self._handlers):
            try:
                handler(payload)
            except Exception as e:
                logger.exception("Event handler failed", extra={"event": self.name})
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

    def __len__(self) -> int:
        return len(self._handlers)


@dataclass(frozen=True)
class SelectionChanged:
    indices: Tuple[int, ...]


@dataclass(frozen=True)
class AxisOrderChanged:
    order: Tuple[str, ...]


@dataclass(frozen=True)
class MouseOver:
    """index is the moused-over row, or None when the pointer left every item."""

    index: Optional[int]


@dataclass
class ViewEvents:
    selection_changed: EventChannel[SelectionChanged] = field(
        default_factory=lambda: EventChannel("selection_changed")
    )
    axis_order_changed: EventChannel[AxisOrderChanged] = field(
        default_factory=lambda: EventChannel("axis_order_changed")
    )
    mouse_over: EventChannel[MouseOver] = field(default_factory=lambda: EventChannel("mouse_over"))

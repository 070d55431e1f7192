from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.events import EventChannel
from cinema_explorer.core.scales import LinearScale

logger = logging.getLogger(__name__)

SLIDER_MIN = 0.0
SLIDER_MAX = 100.0


@dataclass(frozen=True)
class QueryResults:
    indices: Tuple[int, ...]


@dataclass(frozen=True)
class QueryBounds:
    """The custom query point and rough upper/lower limits of similar rows."""

    custom: Dict[str, float]
    upper: Dict[str, float]
    lower: Dict[str, float]


@dataclass
class QueryEvents:
    query: EventChannel[QueryResults] = field(default_factory=lambda: EventChannel("query"))
    custom_changed: EventChannel[QueryBounds] = field(default_factory=lambda: EventChannel("custom_changed"))


class QueryPanel:
    """
    Builds a custom query point over the numeric dimensions and finds rows
    similar to it.

    Each dimension has a 0..100 slider mapped linearly onto its domain. A
    dimension joins the query point once its slider is set and leaves it
    when cleared.
    """

    def __init__(self, dataset: Dataset, threshold: float = 1.0):
        self.dataset = dataset
        self.dimensions: List[str] = [
            d for d in dataset.plottable_dimensions if not dataset.is_categorical(d)
        ]
        self.scales: Dict[str, LinearScale] = {
            d: LinearScale((SLIDER_MIN, SLIDER_MAX), dataset.dimension(d).domain) for d in self.dimensions
        }
        self.threshold = float(threshold)
        self.custom: Dict[str, float] = {}
        self.results: Tuple[int, ...] = ()
        self.events = QueryEvents()

    def _check(self, dimension: str) -> None:
        if dimension not in self.scales:
            raise KeyError(f"Dimension '{dimension}' is not a queryable numeric dimension")

    def set_slider(self, dimension: str, position: float) -> None:
        self._check(dimension)
        position = min(SLIDER_MAX, max(SLIDER_MIN, float(position)))
        self.custom[dimension] = float(self.scales[dimension](position))
        self._changed()

    def set_value(self, dimension: str, value: float) -> None:
        self._check(dimension)
        self.custom[dimension] = float(value)
        self._changed()

    def clear(self, dimension: str) -> None:
        self.custom.pop(dimension, None)
        self._changed()

    def set_threshold(self, threshold: float) -> None:
        if threshold < 0:
            raise ValueError("threshold must be >= 0")
        self.threshold = float(threshold)
        self._changed()

    def bounds(self) -> Tuple[Dict[str, float], Dict[str, float]]:
        """
        (upper, lower) approximations of the region of similar rows: the
        threshold spread evenly over the queried dimensions, in slider units.
        """
        upper: Dict[str, float] = {}
        lower: Dict[str, float] = {}
        if not self.custom:
            return upper, lower

        avg = self.threshold / len(self.custom) * (SLIDER_MAX - SLIDER_MIN)
        for d in self.dimensions:
            if d not in self.custom:
                continue
            s = self.scales[d]
            pos = s.invert(self.custom[d])
            lower[d] = float(s(max(pos - avg, SLIDER_MIN)))
            upper[d] = float(s(min(pos + avg, SLIDER_MAX)))
        return upper, lower

    def _changed(self) -> None:
        upper, lower = self.bounds()
        self.events.custom_changed.emit(QueryBounds(dict(self.custom), upper, lower))

    def run(self) -> Tuple[int, ...]:
        self.results = tuple(self.dataset.get_similar(self.custom, self.threshold))
        logger.info(
            "Similarity query",
            extra={"dataset": self.dataset.name, "threshold": self.threshold, "results": len(self.results)},
        )
        self.events.query.emit(QueryResults(self.results))
        return self.results

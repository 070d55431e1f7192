from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.scales import LinearScale, PointScale

Point = Tuple[float, float]
YScale = Union[LinearScale, PointScale]


@dataclass(frozen=True)
class Margin:
    """Top, right, bottom and left margins of a view, in pixels."""

    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0


class PcoordLayout:
    """
    Coordinate scales of a parallel-coordinates chart.

    - x: point scale placing each dimension's axis along the width
    - y[dim]: numeric dimensions get a linear scale onto
      [height - nan_margin, 0]; NaN and missing values sit at `height`
      (the NaN tick). Categorical dimensions get a point scale onto
      [height, 0]; missing categorical values have no position (NaN).

    Row positions per dimension are cached as numpy arrays and dropped on
    every resize.
    """

    NAN_MARGIN_RATIO = 1.0 / 11.0

    def __init__(self, dataset: Dataset, dimensions: Sequence[str], width: float, height: float) -> None:
        self.dataset = dataset
        self.width = float(width)
        self.height = float(height)
        self.x = PointScale(list(dimensions), (0.0, self.width), padding=1.0)
        self.y: Dict[str, YScale] = {}
        self._positions: Dict[str, np.ndarray] = {}
        for d in dimensions:
            self.y[d] = self._build_y(d)

    @property
    def nan_margin(self) -> float:
        return self.height * self.NAN_MARGIN_RATIO

    def _numeric_range(self) -> Tuple[float, float]:
        return (self.height - self.nan_margin, 0.0)

    def _build_y(self, dimension: str) -> YScale:
        if self.dataset.is_categorical(dimension):
            return PointScale(self.dataset.categories(dimension), (self.height, 0.0))
        low, high = self.dataset.dimension(dimension).domain
        return LinearScale((low, high), self._numeric_range())

    # ------------------------------------------------------------------
    # Dimensions
    # ------------------------------------------------------------------
    @property
    def order(self) -> List[str]:
        return list(self.x.domain)

    def set_order(self, order: Sequence[str]) -> None:
        self.x.set_domain(list(order))

    def add_dimension(self, dimension: str) -> None:
        if dimension not in self.y:
            self.y[dimension] = self._build_y(dimension)

    def remove_dimension(self, dimension: str) -> None:
        self.y.pop(dimension, None)
        self._positions.pop(dimension, None)

    # ------------------------------------------------------------------
    # Sizing
    # ------------------------------------------------------------------
    def resize(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)
        self.x.set_range((0.0, self.width))
        for d, scale in self.y.items():
            if isinstance(scale, PointScale):
                scale.set_range((self.height, 0.0))
            else:
                self.y[d] = scale.with_range(self._numeric_range())
        self._positions.clear()

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------
    def y_positions(self, dimension: str) -> np.ndarray:
        """Y pixel of every row on a dimension (NaN where a row has no position)."""
        cached = self._positions.get(dimension)
        if cached is not None:
            return cached

        scale = self.y[dimension]
        if isinstance(scale, PointScale):
            col = self.dataset.column(dimension)
            pos = np.array([_or_nan(scale(v)) for v in col], dtype=float)
        else:
            values = self.dataset.numeric_values(dimension)
            pos = np.asarray(scale(values), dtype=float)
            pos = np.where(np.isnan(values), self.height, pos)

        pos.flags.writeable = False
        self._positions[dimension] = pos
        return pos

    def y_position(self, dimension: str, index: int) -> Optional[float]:
        pos = self.y_positions(dimension)[index]
        return None if np.isnan(pos) else float(pos)

    def y_of_value(self, dimension: str, value: Any) -> Optional[float]:
        """Y pixel for an arbitrary value (e.g. an overlay row not in the dataset)."""
        scale = self.y[dimension]
        if isinstance(scale, PointScale):
            return scale(value)
        if value is None:
            return self.height
        number = float(value)
        if np.isnan(number):
            return self.height
        return float(scale(number))

    def row_sections(
        self,
        row: Mapping[str, Any],
        x_of: Callable[[str], float],
        order: Optional[Sequence[str]] = None,
    ) -> List[List[Point]]:
        """
        Polyline(s) of a row across the axes, broken wherever the row has a
        missing value. A section touching a single axis becomes a short
        horizontal tick across that axis.
        """
        order = list(order) if order is not None else self.order
        if not order:
            return []
        single = self.width / len(order) / 5

        sections: List[List[str]] = []
        current: List[str] = []
        for d in order:
            if row.get(d) is not None and self.y_of_value(d, row[d]) is not None:
                current.append(d)
            elif current:
                sections.append(current)
                current = []
        if current:
            sections.append(current)

        polylines: List[List[Point]] = []
        for section in sections:
            if len(section) == 1:
                d = section[0]
                x, y = x_of(d), self.y_of_value(d, row[d])
                polylines.append([(x - single / 2, y), (x + single / 2, y)])
            else:
                polylines.append([(x_of(d), self.y_of_value(d, row[d])) for d in section])
        return polylines


def _or_nan(value: Optional[float]) -> float:
    return np.nan if value is None else value

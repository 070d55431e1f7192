from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.events import AxisOrderChanged, SelectionChanged, ViewEvents
from cinema_explorer.core.layout import PcoordLayout

logger = logging.getLogger(__name__)

Extent = Tuple[float, float]


class SelectionEngine:
    """
    Multi-dimensional brushing and axis ordering for a parallel-coordinates view.

    Owns:
    - one optional brush extent per dimension, in pixel space of that
      dimension's y scale
    - the current dimension order (a permutation that axis dragging mutates)
    - the derived selection: rows lying inside every active brush

    The selection is recomputed synchronously on every brush change, on
    dimension add/remove and after a resize; it is never edited directly.
    """

    SELECTION_PAD = 5.0

    def __init__(
        self,
        dataset: Dataset,
        layout: PcoordLayout,
        events: Optional[ViewEvents] = None,
    ) -> None:
        self.dataset = dataset
        self.layout = layout
        self.events = events or ViewEvents()

        self._dimensions: List[str] = layout.order
        self._brushes: Dict[str, Extent] = {}
        self._dragging: Dict[str, float] = {}
        self._suppressed = 0
        self._selection: Tuple[int, ...] = tuple(range(dataset.row_count))

    # ------------------------------------------------------------------
    # Read-only snapshots
    # ------------------------------------------------------------------
    @property
    def dimensions(self) -> List[str]:
        return list(self._dimensions)

    @property
    def brush_extents(self) -> Dict[str, Extent]:
        return dict(self._brushes)

    @property
    def selection(self) -> Tuple[int, ...]:
        return self._selection

    # ------------------------------------------------------------------
    # Brushing
    # ------------------------------------------------------------------
    def set_brush(self, dimension: str, extent: Optional[Sequence[float]]) -> None:
        """
        Install (or clear, with None) the brush on one dimension and recompute.

        An extent whose ends are equal is treated as no brush at all.
        """
        self._store_brush(dimension, extent)
        self.update_selection()

    def clear_brushes(self) -> None:
        self._brushes.clear()
        self.update_selection()

    def _store_brush(self, dimension: str, extent: Optional[Sequence[float]]) -> None:
        if dimension not in self._dimensions:
            raise KeyError(f"Dimension '{dimension}' is not shown by this engine")
        if extent is None:
            self._brushes.pop(dimension, None)
            return
        lo, hi = float(extent[0]), float(extent[1])
        if lo == hi:
            self._brushes.pop(dimension, None)
            return
        self._brushes[dimension] = (min(lo, hi), max(lo, hi))

    def compute_selection(self) -> Tuple[int, ...]:
        """Rows inside every active brush (all rows when nothing is brushed)."""
        mask = np.ones(self.dataset.row_count, dtype=bool)
        for d in self._dimensions:
            extent = self._brushes.get(d)
            if extent is None:
                continue
            y = self.layout.y_positions(d)
            # NaN positions compare False, so rows without a position drop out
            mask &= (extent[0] <= y) & (y <= extent[1])
            if not mask.any():
                break
        return tuple(np.flatnonzero(mask).tolist())

    def update_selection(self, force: bool = False) -> None:
        """
        Recompute the selection; notify only if it changed (or when forced).
        Does nothing while updates are suppressed.
        """
        if self._suppressed:
            return
        selection = self.compute_selection()
        if selection != self._selection or force:
            self._selection = selection
            logger.debug("Selection changed", extra={"selected": len(selection)})
            self.events.selection_changed.emit(SelectionChanged(selection))

    @contextmanager
    def suppress_updates(self) -> Iterator[None]:
        """
        Hold off recomputing while brushes are moved in bulk; recompute once
        (forced) when the outermost block exits.
        """
        self._suppressed += 1
        try:
            yield
        finally:
            self._suppressed -= 1
        if not self._suppressed:
            self.update_selection(force=True)

    def resize(self, width: float, height: float) -> None:
        """Rescale the layout and move every brush proportionally."""
        old_height = self.layout.height
        with self.suppress_updates():
            self.layout.resize(width, height)
            if old_height:
                ratio = self.layout.height / old_height
                for d in list(self._brushes):
                    lo, hi = self._brushes[d]
                    self._store_brush(d, (lo * ratio, hi * ratio))

    def set_selection(self, indices: Iterable[int]) -> None:
        """
        Brush every dimension to the span covering exactly the given rows
        (padded by SELECTION_PAD pixels).

        The result is an axis-aligned box, so it can include rows that were
        not asked for. Dimensions on which none of the rows has a position
        are left unbrushed; an empty set of rows brushes above the axes so
        that nothing is selected.

        :raises IndexError: if an index is not a row of the dataset
        """
        indices = np.asarray(list(indices), dtype=int)
        out_of_range = indices[(indices < 0) | (indices >= self.dataset.row_count)]
        if out_of_range.size:
            raise IndexError(
                f"Row index {int(out_of_range[0])} out of range for dataset '{self.dataset.name}' "
                f"with {self.dataset.row_count} rows"
            )
        pad = self.SELECTION_PAD

        with self.suppress_updates():
            for d in self._dimensions:
                if indices.size == 0:
                    self._store_brush(d, (-3 * pad, -2 * pad))
                    continue
                y = self.layout.y_positions(d)[indices]
                y = y[~np.isnan(y)]
                if y.size == 0:
                    self._store_brush(d, None)
                else:
                    self._store_brush(d, (float(y.min()) - pad, float(y.max()) + pad))

    # ------------------------------------------------------------------
    # Dimensions
    # ------------------------------------------------------------------
    def add_dimension(self, dimension: str, position: Optional[int] = None) -> None:
        if dimension in self._dimensions:
            return
        self.dataset.dimension(dimension)
        self.layout.add_dimension(dimension)
        if position is None:
            self._dimensions.append(dimension)
        else:
            self._dimensions.insert(position, dimension)
        self.layout.set_order(self._dimensions)
        # every axis moved on the x scale
        self.update_selection(force=True)

    def remove_dimension(self, dimension: str) -> None:
        if dimension not in self._dimensions:
            return
        self._dimensions.remove(dimension)
        self._brushes.pop(dimension, None)
        self._dragging.pop(dimension, None)
        self.layout.remove_dimension(dimension)
        self.layout.set_order(self._dimensions)
        self.update_selection(force=True)

    def set_axis_order(self, order: Sequence[str]) -> None:
        """
        Reorder the axes. Names not shown here are ignored; shown dimensions
        missing from `order` keep their relative order at the end.
        """
        new_order = [d for d in dict.fromkeys(order) if d in self._dimensions]
        new_order += [d for d in self._dimensions if d not in new_order]
        self._apply_order(new_order)

    def _apply_order(self, new_order: List[str]) -> None:
        changed = new_order != self._dimensions
        self._dimensions = new_order
        self.layout.set_order(new_order)
        if changed:
            self.events.axis_order_changed.emit(AxisOrderChanged(tuple(new_order)))

    # ------------------------------------------------------------------
    # Axis dragging
    # ------------------------------------------------------------------
    def x_position(self, dimension: str) -> float:
        """Axis x pixel: the pointer position while dragged, else the scale's."""
        dragged = self._dragging.get(dimension)
        if dragged is not None:
            return dragged
        return self.layout.x(dimension)

    def start_drag(self, dimension: str) -> None:
        if dimension not in self._dimensions:
            raise KeyError(f"Dimension '{dimension}' is not shown by this engine")
        self._dragging[dimension] = self.layout.x(dimension)

    def drag(self, dimension: str, x: float) -> None:
        """
        Move a dragged axis to pointer position x (clamped to the chart) and
        re-sort all axes by position. Fires axis_order_changed only when the
        order actually changes.
        """
        if dimension not in self._dragging:
            self.start_drag(dimension)
        self._dragging[dimension] = min(self.layout.width, max(0.0, float(x)))
        new_order = sorted(self._dimensions, key=self.x_position)
        self._apply_order(new_order)

    def end_drag(self, dimension: str) -> None:
        """Drop the pointer override: the axis snaps onto its slot on the scale."""
        self._dragging.pop(dimension, None)

    @property
    def dragging(self) -> Dict[str, float]:
        return dict(self._dragging)

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import plotly.graph_objs as go

from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.draw_scheduler import DrawScheduler, DrawTask
from cinema_explorer.core.index_surface import IndexSurface, Point
from cinema_explorer.core.layout import Margin, PcoordLayout
from cinema_explorer.core.pick_codec import NO_ITEM
from cinema_explorer.core.scales import PointScale
from cinema_explorer.core.selection_engine import SelectionEngine
from cinema_explorer.core.view_base import BaseView

logger = logging.getLogger(__name__)


class ParallelCoordinatesView(BaseView):
    """
    Parallel coordinates chart over the dataset's plottable dimensions.

    - brushing / axis dragging through the embedded SelectionEngine
    - every selection change repaints the index buffer in scheduled batches,
      one polyline per selected row coloured by its position in the selection
    - mouse_move() hit-tests the index buffer and reports the row under the
      pointer via events.mouse_over
    """

    id = "pcoord"
    label = "Parallel Coordinates"
    margin = Margin(top=30, right=10, bottom=10, left=10)

    INDEX_LINE_WIDTH = 3.0

    def __init__(
        self,
        dataset: Dataset,
        width: float = 800,
        height: float = 400,
        filter_regex: Optional[str] = None,
        scheduler: Optional[DrawScheduler] = None,
    ):
        super().__init__(dataset, width, height, filter_regex)

        self.layout = PcoordLayout(dataset, self.dimensions, self.internal_width, self.internal_height)
        self.engine = SelectionEngine(dataset, self.layout, events=self.events)
        self.scheduler = scheduler or DrawScheduler()
        self.index_surface = IndexSurface(self.internal_width, self.internal_height)

        self.highlighted: List[int] = []
        self.overlay: List[Mapping[str, Any]] = []
        self._drawn: Tuple[int, ...] = ()

        self.events.selection_changed.subscribe(lambda _: self.redraw_selected())
        self.redraw_selected()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @property
    def selection(self) -> Tuple[int, ...]:
        return self.engine.selection

    def set_selection(self, indices: Sequence[int]) -> None:
        self.engine.set_selection(indices)

    def set_highlighted(self, indices: Sequence[int]) -> None:
        self.highlighted = list(indices)

    def set_overlay(self, rows: Sequence[Mapping[str, Any]]) -> None:
        """Extra, custom rows (e.g. a query point and its bounds) drawn over the chart."""
        self.overlay = list(rows)

    def resize(self, width: float, height: float) -> None:
        self.parent_width = float(width)
        self.parent_height = float(height)
        self.index_surface.resize(self.internal_width, self.internal_height)
        self.engine.resize(self.internal_width, self.internal_height)

    # ------------------------------------------------------------------
    # Axis dragging
    # ------------------------------------------------------------------
    def start_drag(self, dimension: str) -> None:
        self.engine.start_drag(dimension)

    def drag(self, dimension: str, x: float) -> None:
        self.engine.drag(dimension, x)
        self.redraw_selected()

    def end_drag(self, dimension: str) -> None:
        self.engine.end_drag(dimension)
        self.redraw_selected()

    def set_axis_order(self, order: Sequence[str]) -> None:
        self.engine.set_axis_order(order)
        self.redraw_selected()

    # ------------------------------------------------------------------
    # Index buffer
    # ------------------------------------------------------------------
    def row_path(self, row: Mapping[str, Any]) -> List[List[Point]]:
        return self.layout.row_sections(row, self.engine.x_position, self.engine.dimensions)

    def redraw_selected(self) -> DrawTask:
        self.index_surface.clear()
        self._drawn = tuple(self.engine.selection)
        logger.debug("Scheduling index redraw", extra={"view": self.id, "rows": len(self._drawn)})
        task = DrawTask(self._drawn, self._draw_index_path)
        return self.scheduler.start(self, task)

    def _draw_index_path(self, position: int, row_index: int) -> None:
        for polyline in self.row_path(self.dataset.row(row_index)):
            self.index_surface.stroke_polyline(polyline, self.INDEX_LINE_WIDTH, position)

    def mouse_move(self, x: float, y: float) -> Optional[int]:
        """
        Pointer moved to (x, y), relative to the chart's drawing area.
        Returns the row under the pointer, or None.
        """
        if x < 0 or y < 0:
            return self._last_mouse_over
        position = self.index_surface.index_at(x, y)
        row = self._drawn[position] if NO_ITEM < position < len(self._drawn) else None
        self._report_mouse_over(row)
        return row

    # ------------------------------------------------------------------
    # Plotly rendering
    # ------------------------------------------------------------------
    def compute_data(self) -> pd.DataFrame:
        return self.dataset.subset_frame(self.engine.selection)[self.engine.dimensions]

    def _constraint_range(self, dimension: str) -> Optional[List[float]]:
        """The dimension's brush translated from pixels back to data units."""
        extent = self.engine.brush_extents.get(dimension)
        if extent is None:
            return None
        scale = self.layout.y[dimension]

        if isinstance(scale, PointScale):
            codes = [
                code for code, value in enumerate(scale.domain)
                if extent[0] <= scale(value) <= extent[1]
            ]
            return [float(min(codes)), float(max(codes))] if codes else None

        low, high = self.dataset.dimension(dimension).domain
        ends = sorted(float(np.clip(scale.invert(e), low, high)) for e in extent)
        return ends

    def _parcoords_dimension(self, data: pd.DataFrame, dimension: str) -> Dict[str, Any]:
        spec: Dict[str, Any] = {"label": dimension}
        scale = self.layout.y[dimension]

        if isinstance(scale, PointScale):
            codes = {value: code for code, value in enumerate(scale.domain)}
            spec["values"] = [codes.get(v, np.nan) for v in data[dimension]]
            spec["tickvals"] = list(codes.values())
            spec["ticktext"] = [str(v) for v in codes]
        else:
            spec["values"] = pd.to_numeric(data[dimension], errors="coerce").to_numpy(dtype=float)
            spec["range"] = list(self.dataset.dimension(dimension).domain)

        constraint = self._constraint_range(dimension)
        if constraint is not None:
            spec["constraintrange"] = constraint
        return spec

    def render_figure(self, data: pd.DataFrame) -> go.Figure:
        if data.empty or not self.engine.dimensions:
            return self.empty_figure(f"{self.dataset.name} Parallel Coordinates (no rows selected)")

        highlighted = set(self.highlighted)
        color = [1 if i in highlighted else 0 for i in data.index]
        if self.overlay:
            extra = pd.DataFrame([dict(row) for row in self.overlay], columns=self.engine.dimensions)
            data = pd.concat([data, extra], ignore_index=True)
            color += [2] * len(extra)

        fig = go.Figure(
            go.Parcoords(
                dimensions=[self._parcoords_dimension(data, d) for d in self.engine.dimensions],
                line={
                    "color": color,
                    "colorscale": [[0, "lightgray"], [0.5, "lightskyblue"], [1, "black"]],
                    "cmin": 0,
                    "cmax": 2,
                },
            )
        )
        fig.update_layout(
            title=f"{self.dataset.name} Parallel Coordinates",
            margin=dict(
                l=self.margin.left, r=self.margin.right, t=self.margin.top + 30, b=self.margin.bottom
            ),
            width=self.parent_width,
            height=self.parent_height,
        )
        return fig

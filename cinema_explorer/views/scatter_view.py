from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple, Union

import pandas as pd
import plotly.graph_objs as go

from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.draw_scheduler import DrawScheduler, DrawTask
from cinema_explorer.core.index_surface import IndexSurface
from cinema_explorer.core.layout import Margin
from cinema_explorer.core.pick_codec import NO_ITEM
from cinema_explorer.core.scales import LinearScale, PointScale
from cinema_explorer.core.view_base import BaseView

Scale = Union[LinearScale, PointScale]


class ScatterPlotView(BaseView):
    """
    Scatter plot of two dimensions.

    - X/Y from any two shown dimensions (linear scale for numeric, point
      scale for categorical)
    - rows with a missing or NaN value on either axis are not plottable
    - selected rows are painted into the index buffer as discs
    """

    id = "scatter"
    label = "Scatter Plot"
    margin = Margin(top=25, right=25, bottom=60, left=150)

    INDEX_RADIUS = 10.0

    def __init__(
        self,
        dataset: Dataset,
        x_dimension: Optional[str] = None,
        y_dimension: Optional[str] = None,
        width: float = 800,
        height: float = 400,
        filter_regex: Optional[str] = None,
        scheduler: Optional[DrawScheduler] = None,
    ):
        super().__init__(dataset, width, height, filter_regex)
        if len(self.dimensions) < 1:
            raise ValueError(f"Dataset '{dataset.name}' has no dimensions to plot")

        self.x_dimension = x_dimension or self.dimensions[0]
        self.y_dimension = y_dimension or self.dimensions[min(1, len(self.dimensions) - 1)]
        for d in (self.x_dimension, self.y_dimension):
            if d not in self.dimensions:
                raise KeyError(f"Dimension '{d}' is not shown by this view")

        self.scheduler = scheduler or DrawScheduler()
        self.index_surface = IndexSurface(self.internal_width, self.internal_height)

        self.selection: Tuple[int, ...] = tuple(range(dataset.row_count))
        self.highlighted: List[int] = []
        self.plottable: Tuple[int, ...] = ()

        self._build_scales()
        self.redraw_selected()

    # ------------------------------------------------------------------
    # Scales
    # ------------------------------------------------------------------
    def _scale_for(self, dimension: str, range: Tuple[float, float]) -> Scale:
        if self.dataset.is_categorical(dimension):
            return PointScale(self.dataset.categories(dimension), range)
        return LinearScale(self.dataset.dimension(dimension).domain, range)

    def _build_scales(self) -> None:
        self.x = self._scale_for(self.x_dimension, (0.0, self.internal_width))
        self.y = self._scale_for(self.y_dimension, (self.internal_height, 0.0))

    def _coordinate(self, scale: Scale, dimension: str, index: int) -> Optional[float]:
        value = self.dataset.column(dimension)[index]
        if value is None or (isinstance(value, float) and math.isnan(value)):
            return None
        return scale(value)

    def point_position(self, index: int) -> Optional[Tuple[float, float]]:
        x = self._coordinate(self.x, self.x_dimension, index)
        y = self._coordinate(self.y, self.y_dimension, index)
        if x is None or y is None:
            return None
        return (float(x), float(y))

    def plottable_points(self, indices: Sequence[int]) -> List[int]:
        """Rows that have a position on both axes."""
        return [i for i in indices if self.point_position(i) is not None]

    @property
    def unplottable_count(self) -> int:
        return len(self.selection) - len(self.plottable)

    def set_dimensions(self, x_dimension: Optional[str] = None, y_dimension: Optional[str] = None) -> None:
        for d in (x_dimension, y_dimension):
            if d is not None and d not in self.dimensions:
                raise KeyError(f"Dimension '{d}' is not shown by this view")
        self.x_dimension = x_dimension or self.x_dimension
        self.y_dimension = y_dimension or self.y_dimension
        self._build_scales()
        self.redraw_selected()

    def resize(self, width: float, height: float) -> None:
        self.parent_width = float(width)
        self.parent_height = float(height)
        self.index_surface.resize(self.internal_width, self.internal_height)
        self._build_scales()
        self.redraw_selected()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def set_selection(self, indices: Sequence[int]) -> None:
        self.selection = tuple(indices)
        self.redraw_selected()

    def set_highlighted(self, indices: Sequence[int]) -> None:
        self.highlighted = list(indices)

    def redraw_selected(self) -> DrawTask:
        self.index_surface.clear()
        self.plottable = tuple(self.plottable_points(self.selection))
        task = DrawTask(self.plottable, self._draw_index_point)
        return self.scheduler.start(self, task)

    def _draw_index_point(self, position: int, row_index: int) -> None:
        x, y = self.point_position(row_index)
        self.index_surface.fill_circle(x, y, self.INDEX_RADIUS, position)

    def mouse_move(self, x: float, y: float) -> Optional[int]:
        if x < 0 or y < 0:
            return self._last_mouse_over
        position = self.index_surface.index_at(x, y)
        row = self.plottable[position] if NO_ITEM < position < len(self.plottable) else None
        self._report_mouse_over(row)
        return row

    # ------------------------------------------------------------------
    # Plotly rendering
    # ------------------------------------------------------------------
    def compute_data(self) -> pd.DataFrame:
        cols = list(dict.fromkeys([self.x_dimension, self.y_dimension]))
        return self.dataset.subset_frame(self.plottable)[cols]

    def render_figure(self, data: pd.DataFrame) -> go.Figure:
        if data.empty:
            return self.empty_figure(f"{self.dataset.name} Scatter Plot (no plottable rows)")

        highlighted = data.loc[data.index.isin(self.highlighted)]

        fig = go.Figure()
        fig.add_trace(
            go.Scatter(
                x=data[self.x_dimension],
                y=data[self.y_dimension],
                mode="markers",
                name="selected",
                customdata=list(data.index),
                marker=dict(size=12, color="lightgray", line=dict(width=1, color="gray")),
            )
        )
        if not highlighted.empty:
            fig.add_trace(
                go.Scatter(
                    x=highlighted[self.x_dimension],
                    y=highlighted[self.y_dimension],
                    mode="markers",
                    name="highlighted",
                    customdata=list(highlighted.index),
                    marker=dict(size=14, color="lightskyblue"),
                )
            )

        title = f"{self.dataset.name} Scatter Plot"
        if self.unplottable_count:
            title += f" ({self.unplottable_count} point(s) could not be plotted)"

        fig.update_layout(
            title=title,
            xaxis_title=self.x_dimension,
            yaxis_title=self.y_dimension,
            margin=dict(l=self.margin.left, r=self.margin.right, t=self.margin.top + 30, b=self.margin.bottom),
            width=self.parent_width,
            height=self.parent_height,
        )
        return fig

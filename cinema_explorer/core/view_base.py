from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Protocol, Sequence, runtime_checkable

import pandas as pd
import plotly.graph_objs as go

from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.events import MouseOver, ViewEvents
from cinema_explorer.core.layout import Margin


@runtime_checkable
class SelectableView(Protocol):
    """
    Capability of any view that can show a selection of rows and report
    which row is under the pointer (via events.mouse_over).
    """

    events: ViewEvents

    def set_selection(self, indices: Sequence[int]) -> None: ...


class BaseView(ABC):
    """
    Abstract base class for the plotly-rendered views.

    Defines the contract that every view in the app must follow
    - expose an 'id' - used internally
    - expose a 'label' - used for UI/human-readable applications
    - implement 'set_selection' - show the given rows
    - implement 'compute_data' - the rows currently shown, as a DataFrame
    - implement 'render_figure' - used to render the figure using Plotly
    """

    id: str = None
    label: str = None
    margin = Margin()

    def __init__(
        self,
        dataset: Dataset,
        width: float,
        height: float,
        filter_regex: Optional[str] = None,
    ):
        self.dataset = dataset
        self.filter = re.compile(filter_regex) if filter_regex else None
        self.events = ViewEvents()

        self.parent_width = float(width)
        self.parent_height = float(height)

        # dimensions shown on the view; file references are never scaled
        self.dimensions: List[str] = [
            d for d in dataset.plottable_dimensions
            if self.filter is None or not self.filter.search(d)
        ]
        self._last_mouse_over: Optional[int] = None

    @property
    def internal_width(self) -> float:
        return self.parent_width - self.margin.left - self.margin.right

    @property
    def internal_height(self) -> float:
        return self.parent_height - self.margin.top - self.margin.bottom

    @abstractmethod
    def set_selection(self, indices: Sequence[int]) -> None:
        raise NotImplementedError()

    @abstractmethod
    def compute_data(self) -> pd.DataFrame:
        """
        :return: data: a dataframe containing the rows the view currently shows
        """
        raise NotImplementedError()

    @abstractmethod
    def render_figure(self, data: Any) -> go.Figure:
        """
        Render the figure given the computed data
        :param data: the data provided by {@link compute_data()}
        :return: the Plotly figure for the current state
        """
        raise NotImplementedError()

    # ------------------------------------------------------------------
    # Common helpers for all views
    # ------------------------------------------------------------------
    def _report_mouse_over(self, index: Optional[int]) -> None:
        """Emit mouse_over only when the item under the pointer changes."""
        if index != self._last_mouse_over:
            self._last_mouse_over = index
            self.events.mouse_over.emit(MouseOver(index))

    @staticmethod
    def empty_figure(message: str) -> go.Figure:
        """
        Standardised 'no data' figure used by all views.
        """
        fig = go.Figure()
        fig.update_layout(
            title=message,
            xaxis={"visible": False},
            yaxis={"visible": False},
        )
        return fig

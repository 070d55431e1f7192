import plotly.graph_objs as go
import pytest

from cinema_explorer.core.csv_parser import parse_csv
from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.draw_scheduler import DrawScheduler
from cinema_explorer.views.scatter_view import ScatterPlotView

SCATTER_CSV = "a,b,c\n0,0,x\n5,NaN,y\n10,10,\n"


def _make_view(x="a", y="b"):
    """
    Helper creating a scatter plot with a 100 x 110 drawing area.

    Row 0 sits at the bottom-left corner, row 2 at the top-right one;
    row 1 has no 'b' value and cannot be plotted against it.
    """
    ds = Dataset.from_table(parse_csv(SCATTER_CSV), name="test")
    view = ScatterPlotView(ds, x, y, width=275, height=195, scheduler=DrawScheduler())
    hovered = []
    view.events.mouse_over.subscribe(lambda e: hovered.append(e.index))
    return view, hovered


def test_default_axes_are_the_first_two_dimensions():
    ds = Dataset.from_table(parse_csv(SCATTER_CSV), name="test")

    view = ScatterPlotView(ds)

    assert (view.x_dimension, view.y_dimension) == ("a", "b")


def test_unknown_axis_raises():
    ds = Dataset.from_table(parse_csv(SCATTER_CSV), name="test")

    with pytest.raises(KeyError):
        ScatterPlotView(ds, "a", "zzz")


def test_rows_without_position_are_not_plottable():
    view, _ = _make_view()

    assert view.plottable == (0, 2)
    assert view.unplottable_count == 1
    assert view.point_position(0) == (0.0, 110.0)
    assert view.point_position(2) == (100.0, 0.0)
    assert view.point_position(1) is None


def test_hit_testing_reports_rows_under_the_pointer():
    view, hovered = _make_view()
    view.scheduler.run_until_idle()

    assert view.mouse_move(2, 108) == 0
    assert view.mouse_move(98, 1) == 2
    assert view.mouse_move(50, 50) is None
    assert hovered == [0, 2, None]


def test_categorical_axis():
    view, _ = _make_view()

    view.set_dimensions(y_dimension="c")

    assert view.plottable == (0, 1)
    assert view.point_position(1) == (50.0, 0.0)


def test_set_selection_limits_plotted_rows():
    view, _ = _make_view()

    view.set_selection([1, 2])

    assert view.plottable == (2,)
    assert list(view.compute_data().index) == [2]


def test_resize_rebuilds_scales():
    view, _ = _make_view()

    view.resize(375, 305)

    assert view.index_surface.pixels.shape == (220, 200, 3)
    assert view.point_position(2) == (200.0, 0.0)


def test_render_figure():
    view, _ = _make_view()
    view.set_highlighted([2])

    fig = view.render_figure(view.compute_data())

    assert isinstance(fig, go.Figure)
    assert [t.name for t in fig.data] == ["selected", "highlighted"]
    assert list(fig.data[0].x) == [0.0, 10.0]
    assert "1 point(s) could not be plotted" in fig.layout.title.text


def test_render_figure_without_rows():
    view, _ = _make_view()
    view.set_selection([1])

    fig = view.render_figure(view.compute_data())

    assert len(fig.data) == 0

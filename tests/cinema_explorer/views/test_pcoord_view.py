import plotly.graph_objs as go
import pytest

from cinema_explorer.core.csv_parser import parse_csv
from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.draw_scheduler import DrawScheduler
from cinema_explorer.core.view_base import SelectableView
from cinema_explorer.views.pcoord_view import ParallelCoordinatesView

PCOORD_CSV = "a,b,c\n1,10,x\n2,20,y\n3,30,x\n4,40,z\n"


def _make_view(text=PCOORD_CSV, **kwargs):
    """
    Helper creating a view whose drawing area is 300 x 110 pixels.

    Axes sit at x = 75, 150, 225. Row 2 crosses 'a' and 'b' at y = 33.3,
    row 3 runs along the top (y = 0).
    """
    ds = Dataset.from_table(parse_csv(text), name="test")
    view = ParallelCoordinatesView(ds, width=320, height=150, scheduler=DrawScheduler(), **kwargs)
    hovered = []
    view.events.mouse_over.subscribe(lambda e: hovered.append(e.index))
    return view, hovered


def test_view_shape():
    view, _ = _make_view()

    assert isinstance(view, SelectableView)
    assert (view.internal_width, view.internal_height) == (300, 110)
    assert view.dimensions == ["a", "b", "c"]
    assert view.selection == (0, 1, 2, 3)
    assert view.scheduler.pending(view) is not None


def test_filter_regex_and_file_columns_hide_dimensions():
    view, _ = _make_view("FILE_img,a,b,c\np.png,1,2,x\nq.png,3,4,y\n", filter_regex="^b$")

    assert view.dimensions == ["a", "c"]
    assert view.engine.dimensions == ["a", "c"]


def test_brushing_redraws_the_index_buffer_for_hit_testing():
    view, hovered = _make_view()

    view.engine.set_brush("a", (0, 50))
    view.scheduler.run_until_idle()

    assert view.selection == (2, 3)
    assert view.mouse_move(110, 33) == 2
    assert view.mouse_move(110, 33) == 2
    assert view.mouse_move(110, 1) == 3
    assert view.mouse_move(110, 80) is None
    assert hovered == [2, 3, None]


def test_pointer_outside_the_chart_keeps_the_last_item():
    view, hovered = _make_view()
    view.scheduler.run_until_idle()

    assert view.mouse_move(110, 1) == 3
    assert view.mouse_move(-5, 10) == 3
    assert hovered == [3]


def test_set_selection():
    view, _ = _make_view()

    view.set_selection([0, 1])

    assert view.selection == (0, 1)
    assert view.scheduler.pending(view).items == [0, 1]


def test_dragging_reorders_axes():
    view, _ = _make_view()
    orders = []
    view.events.axis_order_changed.subscribe(lambda e: orders.append(e.order))

    view.start_drag("a")
    view.drag("a", 160)
    view.end_drag("a")

    assert view.engine.dimensions == ["b", "a", "c"]
    assert orders == [("b", "a", "c")]


def test_resize_rescales_buffer_and_brushes():
    view, _ = _make_view()
    view.engine.set_brush("a", (0, 50))

    view.resize(620, 260)

    assert view.index_surface.pixels.shape == (220, 600, 3)
    assert view.engine.brush_extents["a"] == pytest.approx((0, 100))
    assert view.selection == (2, 3)


def test_compute_data_follows_selection_and_axis_order():
    view, _ = _make_view()
    view.engine.set_brush("a", (0, 50))
    view.set_axis_order(["c", "a", "b"])

    data = view.compute_data()

    assert list(data.index) == [2, 3]
    assert list(data.columns) == ["c", "a", "b"]


def test_render_figure_with_brush():
    view, _ = _make_view()
    view.engine.set_brush("a", (0, 50))
    view.set_highlighted([3])

    fig = view.render_figure(view.compute_data())

    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 1
    trace = fig.data[0]
    assert isinstance(trace, go.Parcoords)
    assert [d.label for d in trace.dimensions] == ["a", "b", "c"]
    assert list(trace.dimensions[0].constraintrange) == pytest.approx([2.5, 4.0])
    assert list(trace.line.color) == [0, 1]
    assert list(trace.dimensions[2].ticktext) == ["x", "y", "z"]


def test_render_figure_with_overlay_rows():
    view, _ = _make_view()
    view.set_overlay([{"a": 2.5, "b": 25, "c": "y"}])

    fig = view.render_figure(view.compute_data())

    assert list(fig.data[0].line.color) == [0, 0, 0, 0, 2]


def test_render_figure_without_rows():
    view, _ = _make_view()
    view.set_selection([])

    fig = view.render_figure(view.compute_data())

    assert len(fig.data) == 0
    assert "no rows selected" in fig.layout.title.text


def test_adding_and_removing_axes_repaints_the_index_buffer():
    view, hovered = _make_view(filter_regex="^c$")
    view.scheduler.run_until_idle()
    before = view.index_surface.pixels.copy()
    # with axes a, b at x = 100, 200 the top row runs along y = 0 there
    assert view.mouse_move(150, 1) == 3

    view.engine.add_dimension("c")
    view.scheduler.run_until_idle()

    assert view.selection == (0, 1, 2, 3)
    assert (view.index_surface.pixels != before).any()
    # axes now at 75, 150, 225: row 2 drops from 33.3 on 'b' to 110 on 'c'
    assert view.mouse_move(240, 1) is None
    assert view.mouse_move(200, 85) == 2

    view.engine.remove_dimension("c")
    view.scheduler.run_until_idle()

    assert (view.index_surface.pixels == before).all()

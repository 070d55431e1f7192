import math

import pytest

from cinema_explorer.core.csv_parser import parse_csv
from cinema_explorer.core.dataset import Dataset
from cinema_explorer.core.layout import PcoordLayout

LAYOUT_CSV = "a,b,c\n1,10,x\n2,20,y\n3,30,x\n4,40,z\n"


def _make_layout(text=LAYOUT_CSV, width=300, height=110):
    ds = Dataset.from_table(parse_csv(text), name="test")
    return PcoordLayout(ds, ds.plottable_dimensions, width, height)


def test_axes_are_spread_with_one_step_of_padding():
    layout = _make_layout()

    assert [layout.x(d) for d in layout.order] == [75, 150, 225]


def test_numeric_axis_leaves_room_for_the_nan_tick():
    layout = _make_layout()

    assert layout.nan_margin == pytest.approx(10)
    assert layout.y_positions("a").tolist() == pytest.approx([100, 200 / 3, 100 / 3, 0])


def test_nan_and_missing_numeric_values_sit_on_the_nan_tick():
    layout = _make_layout("a,b\n1,5\nNaN,6\n3,\n")

    assert layout.y_positions("a").tolist() == [100, 110, 0]
    assert layout.y_positions("b")[2] == 110


def test_categorical_axis_and_missing_category():
    layout = _make_layout()
    assert layout.y_positions("c").tolist() == [110, 55, 110, 0]

    sparse = _make_layout("a,b\n1,x\n2,\n")
    assert sparse.y_position("b", 0) == 55
    assert sparse.y_position("b", 1) is None
    assert math.isnan(sparse.y_positions("b")[1])


def test_positions_are_recomputed_after_resize():
    layout = _make_layout()
    assert layout.y_positions("a")[0] == pytest.approx(100)

    layout.resize(600, 220)

    assert layout.y_positions("a")[0] == pytest.approx(200)
    assert layout.y_positions("c")[0] == pytest.approx(220)
    assert layout.x("a") == 150


def test_row_sections_break_at_missing_values():
    layout = _make_layout()
    row = {"a": 1.0, "b": None, "c": "x"}

    sections = layout.row_sections(row, layout.x)

    # single-axis sections become ticks one fifth of an axis slot wide
    assert sections == [
        [(65.0, pytest.approx(100)), (85.0, pytest.approx(100))],
        [(215.0, 110.0), (235.0, 110.0)],
    ]


def test_row_sections_full_row_is_one_polyline():
    layout = _make_layout()

    sections = layout.row_sections({"a": 4.0, "b": 40.0, "c": "z"}, layout.x)

    assert sections == [[(75.0, 0.0), (150.0, 0.0), (225.0, 0.0)]]


def test_add_and_remove_dimension():
    layout = _make_layout()

    layout.remove_dimension("b")
    layout.set_order(["a", "c"])
    assert "b" not in layout.y
    assert layout.order == ["a", "c"]

    layout.add_dimension("b")
    assert layout.y_positions("b")[3] == pytest.approx(0)

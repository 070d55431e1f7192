import pytest

from cinema_explorer.core.axis_order import AxisOrderStore
from cinema_explorer.core.csv_parser import parse_csv
from cinema_explorer.validation import FormatError

AXIS_CSV = (
    "category,value,a,b,c\n"
    "view,first,3,1,2\n"
    "view,second,,2,1\n"
    "other,x,1,1,\n"
)


def _make_store(text=AXIS_CSV, dimensions=("a", "b", "c")):
    return AxisOrderStore.from_table(parse_csv(text), list(dimensions))


def test_orderings_sort_dimensions_by_priority():
    store = _make_store()

    assert store.order_for("view", "first") == ("b", "c", "a")


def test_missing_priority_goes_last_and_ties_keep_column_order():
    store = _make_store()

    assert store.order_for("view", "second") == ("c", "b", "a")
    assert store.order_for("other", "x") == ("a", "b", "c")


def test_orderings_are_grouped_by_category():
    store = _make_store()

    assert store.categories == ["view", "other"]
    assert [o.name for o in store.orderings("view")] == ["first", "second"]
    assert len(store) == 3


def test_unknown_lookups():
    store = _make_store()

    assert store.order_for("view", "nope") is None
    with pytest.raises(KeyError):
        store.orderings("nope")


def test_table_naming_unknown_dimension_is_rejected():
    with pytest.raises(FormatError) as excinfo:
        _make_store(dimensions=("a", "b"))
    assert excinfo.value.codes == ["AXIS_UNKNOWN_DIMENSION"]

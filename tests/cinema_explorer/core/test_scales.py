import math

import numpy as np
import pytest

from cinema_explorer.core.scales import LinearScale, PointScale


def test_linear_scale_maps_and_inverts():
    s = LinearScale((0, 10), (100, 0))

    assert s(0) == 100
    assert s(10) == 0
    assert s(2.5) == pytest.approx(75)
    assert s.invert(75) == pytest.approx(2.5)


def test_linear_scale_accepts_arrays_and_keeps_nan():
    s = LinearScale((0, 10), (0, 100))

    out = s(np.array([0.0, 5.0, np.nan]))

    assert out[:2].tolist() == [0.0, 50.0]
    assert math.isnan(out[2])


def test_degenerate_linear_scale_maps_to_range_midpoint():
    s = LinearScale((3, 3), (100, 0))

    assert s(3) == 50
    assert s.invert(20) == 3
    assert LinearScale((0, 10), (5, 5)).invert(5) == 5


def test_point_scale_with_padding():
    s = PointScale(["a", "b"], (0, 300), padding=1)

    assert s.step == 100
    assert s("a") == 100
    assert s("b") == 200


def test_point_scale_reversed_range():
    s = PointScale(["x", "y", "z"], (110, 0))

    assert [s(v) for v in ["x", "y", "z"]] == [110, 55, 0]


def test_point_scale_unknown_and_duplicate_values():
    s = PointScale(["x", "y", "x"], (0, 10))

    assert s.domain == ["x", "y"]
    assert s("nope") is None
    assert s([1, 2]) is None
    assert "x" in s


def test_point_scale_single_value_sits_in_the_middle():
    s = PointScale(["only"], (110, 0))

    assert s("only") == 55


def test_point_scale_set_domain_and_range():
    s = PointScale(["a", "b"], (0, 300), padding=1)

    s.set_domain(["b", "a"])
    assert s("b") == 100

    s.set_range((0, 600))
    assert s("a") == 400

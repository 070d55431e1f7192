from cinema_explorer.core.index_surface import IndexSurface
from cinema_explorer.core.pick_codec import NO_ITEM


def test_new_surface_is_background():
    surface = IndexSurface(100, 50)

    assert surface.pixels.shape == (50, 100, 3)
    assert surface.index_at(10, 10) == NO_ITEM


def test_fill_circle():
    surface = IndexSurface(100, 100)

    surface.fill_circle(50, 50, 10, 3)

    assert surface.index_at(50, 50) == 3
    assert surface.index_at(57, 50) == 3
    assert surface.index_at(5, 5) == NO_ITEM


def test_stroke_polyline():
    surface = IndexSurface(100, 100)

    surface.stroke_polyline([(10, 20), (90, 20), (90, 80)], 3, 0)

    assert surface.index_at(50, 20) == 0
    assert surface.index_at(90, 50) == 0
    assert surface.index_at(50, 50) == NO_ITEM


def test_later_strokes_paint_over_earlier_ones():
    surface = IndexSurface(100, 100)

    surface.stroke_segment((10, 20), (90, 20), 3, 1)
    surface.stroke_segment((50, 0), (50, 99), 3, 2)

    assert surface.index_at(50, 20) == 2
    assert surface.index_at(20, 20) == 1


def test_shapes_off_the_surface_are_ignored():
    surface = IndexSurface(20, 20)

    surface.fill_circle(-100, -100, 5, 1)
    surface.stroke_segment((200, 200), (300, 300), 3, 1)

    assert not surface.pixels.any()


def test_clear_and_resize():
    surface = IndexSurface(20, 20)
    surface.fill_circle(10, 10, 5, 1)

    surface.clear()
    assert not surface.pixels.any()

    surface.fill_circle(10, 10, 5, 1)
    surface.resize(40.4, 10)
    assert surface.pixels.shape == (10, 40, 3)
    assert not surface.pixels.any()

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from cinema_explorer.core.pick_codec import NO_ITEM, encode, index_at_point

Point = Tuple[float, float]


class IndexSurface:
    """
    Invisible index buffer: an RGB raster where each item is painted in the
    colour encoding its index. Black (index -1) is background.

    Coordinates are pixels with (0, 0) at the top-left; a pixel (px, py)
    is covered when its centre (px + 0.5, py + 0.5) lies inside the shape.
    """

    def __init__(self, width: int, height: int):
        self.resize(width, height)

    def clear(self) -> None:
        self.pixels[...] = 0

    def resize(self, width: int, height: int) -> None:
        """Resize and clear."""
        self.width = max(0, int(round(width)))
        self.height = max(0, int(round(height)))
        self.pixels = np.zeros((self.height, self.width, 3), dtype=np.uint8)

    def _window(self, x0: float, y0: float, x1: float, y1: float):
        px0 = max(0, int(np.floor(x0)))
        py0 = max(0, int(np.floor(y0)))
        px1 = min(self.width, int(np.ceil(x1)) + 1)
        py1 = min(self.height, int(np.ceil(y1)) + 1)
        if px0 >= px1 or py0 >= py1:
            return None
        ys, xs = np.mgrid[py0:py1, px0:px1]
        return (py0, py1, px0, px1), xs + 0.5, ys + 0.5

    def fill_circle(self, cx: float, cy: float, radius: float, index: int) -> None:
        win = self._window(cx - radius, cy - radius, cx + radius, cy + radius)
        if win is None:
            return
        (py0, py1, px0, px1), xs, ys = win
        mask = (xs - cx) ** 2 + (ys - cy) ** 2 <= radius ** 2
        self.pixels[py0:py1, px0:px1][mask] = encode(index)

    def stroke_segment(self, p0: Point, p1: Point, line_width: float, index: int) -> None:
        half = line_width / 2.0
        (ax, ay), (bx, by) = p0, p1
        win = self._window(min(ax, bx) - half, min(ay, by) - half, max(ax, bx) + half, max(ay, by) + half)
        if win is None:
            return
        (py0, py1, px0, px1), xs, ys = win

        dx, dy = bx - ax, by - ay
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            t = np.zeros_like(xs)
        else:
            t = np.clip(((xs - ax) * dx + (ys - ay) * dy) / length_sq, 0.0, 1.0)
        dist_sq = (xs - (ax + t * dx)) ** 2 + (ys - (ay + t * dy)) ** 2
        self.pixels[py0:py1, px0:px1][dist_sq <= half * half] = encode(index)

    def stroke_polyline(self, points: Sequence[Point], line_width: float, index: int) -> None:
        for p0, p1 in zip(points, points[1:]):
            self.stroke_segment(p0, p1, line_width, index)

    def index_at(self, x: float, y: float) -> int:
        if self.width == 0 or self.height == 0:
            return NO_ITEM
        return index_at_point(self.pixels, int(x), int(y))

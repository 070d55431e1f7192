"""
Pick-index codec: item index <-> RGB colour.

A renderer paints every item into an invisible "index buffer" in the colour
encode(i); reading a pixel back and decoding it tells which item is there.
Index -1 (black) means "no item". Colours only address 256**3 - 1 items:
indices above MAX_INDEX all saturate to white and cannot be told apart.
"""

from __future__ import annotations

from collections import Counter
from typing import Tuple

import numpy as np

RGB = Tuple[int, int, int]

NO_ITEM = -1
MAX_INDEX = 256 ** 3 - 2
WHITE: RGB = (255, 255, 255)

# 3x3 neighbourhood, at least 5 samples must agree
SAMPLE_RADIUS = 1
MIN_VOTES = 5


def encode(index: int) -> RGB:
    if index < NO_ITEM:
        raise ValueError(f"Pick index must be >= -1, got {index}")
    if index > MAX_INDEX:
        return WHITE
    n = index + 1
    b = n // 65536
    g = (n - b * 65536) // 256
    r = n - b * 65536 - g * 256
    return (r, g, b)


def encode_css(index: int) -> str:
    r, g, b = encode(index)
    return f"rgb({r},{g},{b})"


def decode(r: int, g: int, b: int) -> int:
    return int(r) + int(g) * 256 + int(b) * 65536 - 1


def decode_array(pixels: np.ndarray) -> np.ndarray:
    """Decode an (..., 3) uint8 array of colours into an array of indices."""
    px = pixels[..., :3].astype(np.int64)
    return px[..., 0] + px[..., 1] * 256 + px[..., 2] * 65536 - 1


def index_at_point(surface: np.ndarray, x: int, y: int) -> int:
    """
    Item under pixel (x, y) of an index-encoded (height, width, 3) surface.

    Samples the 3x3 neighbourhood around the point (pixels off the surface
    read as black) and returns the index at least MIN_VOTES samples agree on,
    or NO_ITEM if the neighbourhood is empty or too noisy.
    """
    height, width = surface.shape[:2]
    x, y = int(x), int(y)

    window = np.zeros((2 * SAMPLE_RADIUS + 1, 2 * SAMPLE_RADIUS + 1, 3), dtype=np.uint8)
    y0, y1 = max(0, y - SAMPLE_RADIUS), min(height, y + SAMPLE_RADIUS + 1)
    x0, x1 = max(0, x - SAMPLE_RADIUS), min(width, x + SAMPLE_RADIUS + 1)
    if y0 < y1 and x0 < x1:
        window[y0 - (y - SAMPLE_RADIUS):y1 - (y - SAMPLE_RADIUS),
               x0 - (x - SAMPLE_RADIUS):x1 - (x - SAMPLE_RADIUS)] = surface[y0:y1, x0:x1, :3]

    votes = Counter(decode_array(window).ravel().tolist())
    index, count = votes.most_common(1)[0]
    return int(index) if count >= MIN_VOTES else NO_ITEM

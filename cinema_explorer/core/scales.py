"""
Minimal continuous/ordinal scales mapping data values to pixel coordinates.

Both follow the conventions of d3's scaleLinear / scalePoint so positions
agree with what a browser-side renderer would draw.
"""

from __future__ import annotations

from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple


class LinearScale:
    """
    Continuous scale: domain [d0, d1] -> range [r0, r1].

    A degenerate domain (d0 == d1) maps every value to the middle of the range.
    """

    def __init__(self, domain: Tuple[float, float] = (0.0, 1.0), range: Tuple[float, float] = (0.0, 1.0)):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range[0]), float(range[1]))

    def __call__(self, value):
        d0, d1 = self.domain
        r0, r1 = self.range
        span = d1 - d0
        if span == 0:
            # NaN stays NaN
            t = value * 0.0 + 0.5
        else:
            t = (value - d0) / span
        return r0 + t * (r1 - r0)

    def invert(self, pixel):
        r0, r1 = self.range
        d0, d1 = self.domain
        span = r1 - r0
        if span == 0:
            return (d0 + d1) / 2
        return d0 + (pixel - r0) / span * (d1 - d0)

    def with_range(self, range: Tuple[float, float]) -> "LinearScale":
        return LinearScale(self.domain, range)

    def __repr__(self) -> str:
        return f"LinearScale(domain={self.domain}, range={self.range})"


class PointScale:
    """
    Ordinal scale placing each distinct domain value at evenly spaced points.

    `padding` is the outer padding in multiples of the step (d3 semantics).
    Values not in the domain map to None.
    """

    def __init__(self, domain: Sequence[Hashable] = (), range: Tuple[float, float] = (0.0, 1.0), padding: float = 0.0):
        self.padding = float(padding)
        self.range = (float(range[0]), float(range[1]))
        self.domain: List[Hashable] = []
        self._positions: Dict[Hashable, float] = {}
        self.set_domain(domain)

    def set_domain(self, domain: Sequence[Hashable]) -> None:
        # duplicate values collapse onto their first occurrence
        self.domain = list(dict.fromkeys(domain))
        self._rescale()

    def set_range(self, range: Tuple[float, float]) -> None:
        self.range = (float(range[0]), float(range[1]))
        self._rescale()

    @property
    def step(self) -> float:
        start, stop = sorted(self.range)
        n = len(self.domain)
        return (stop - start) / max(1.0, n - 1 + self.padding * 2)

    def _rescale(self) -> None:
        n = len(self.domain)
        r0, r1 = self.range
        reverse = r1 < r0
        start, stop = (r1, r0) if reverse else (r0, r1)
        step = self.step
        start += (stop - start - step * (n - 1)) * 0.5
        values = [start + step * i for i in range(n)]
        if reverse:
            values.reverse()
        self._positions = dict(zip(self.domain, values))

    def __call__(self, value: Any) -> Optional[float]:
        try:
            return self._positions.get(value)
        except TypeError:
            return None

    def __contains__(self, value: Any) -> bool:
        return value in self._positions

    def __repr__(self) -> str:
        return f"PointScale(domain={self.domain}, range={self.range}, padding={self.padding})"


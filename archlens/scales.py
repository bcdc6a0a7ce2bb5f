"""Square-root scales mapping lines of code to pixel magnitudes.

Area, not radius, is proportional to the metric: a component with four
times the lines of code gets twice the radius.
"""

from __future__ import annotations

import math
from typing import Iterable, Tuple

RADIUS_RANGE: Tuple[float, float] = (5.0, 40.0)
STROKE_RANGE: Tuple[float, float] = (1.0, 10.0)


class SqrtScale:
    """Continuous ``sqrt`` scale from ``[d0, d1]`` onto ``[r0, r1]``.

    Values outside the domain are clamped, so the output always lies in
    the pixel range. A collapsed domain (``d0 == d1``) maps everything to
    the midpoint of the range.
    """

    def __init__(self, domain: Tuple[float, float], range_: Tuple[float, float]):
        self.d0, self.d1 = float(domain[0]), float(domain[1])
        self.r0, self.r1 = float(range_[0]), float(range_[1])

    def __call__(self, value: float) -> float:
        span = self.d1 - self.d0
        if span <= 0:
            return (self.r0 + self.r1) / 2.0
        t = (float(value) - self.d0) / span
        t = min(1.0, max(0.0, t))
        return self.r0 + (self.r1 - self.r0) * math.sqrt(t)

    def __repr__(self) -> str:
        return f"SqrtScale(domain=({self.d0:g}, {self.d1:g}), range=({self.r0:g}, {self.r1:g}))"


def _domain_max(values: Iterable[float]) -> float:
    # Floor of 1 keeps the domain [1, max] well formed for empty / tiny inputs.
    return max([1.0, *(float(v) for v in values)])


def radius_scale(locs: Iterable[float], range_: Tuple[float, float] = RADIUS_RANGE) -> SqrtScale:
    """Node radius scale over the visible nodes' ``loc`` values."""
    return SqrtScale((1.0, _domain_max(locs)), range_)


def stroke_scale(weights: Iterable[float], range_: Tuple[float, float] = STROKE_RANGE) -> SqrtScale:
    """Edge stroke-width scale over the visible edges' weights."""
    return SqrtScale((1.0, _domain_max(weights)), range_)


def edge_weight(source_loc: float, target_loc: float) -> float:
    """Weight of a dependency edge: mean size of its two endpoints."""
    return (float(source_loc) + float(target_loc)) / 2.0

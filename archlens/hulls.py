"""Padded convex hulls around cluster members, and stable cluster colours."""

from __future__ import annotations

import zlib
from typing import Dict, Hashable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import matplotlib
from matplotlib import colors as mcolors

Pos = Tuple[float, float]

CLUSTER_PALETTE = "tab10"
LAYER_PALETTE = "Paired"
NEUTRAL_BORDER = "#ffffff"

MIN_HULL_POINTS = 3

# --------------------------- Colours ---------------------------

def stable_index(key: Hashable, size: int) -> int:
    """Deterministic palette slot for ``key``; independent of arrival order."""
    return zlib.crc32(str(key).encode("utf-8")) % size

def palette_color(key: Hashable, palette: str = CLUSTER_PALETTE) -> str:
    """Hex colour for ``key`` drawn from a categorical Matplotlib colormap."""
    cmap = matplotlib.colormaps.get_cmap(palette)
    return mcolors.to_hex(cmap(stable_index(key, cmap.N)), keep_alpha=False)

def cluster_color(cluster_id: Optional[int]) -> str:
    """Border / hull colour of a cluster; unclustered nodes get the neutral one."""
    if cluster_id is None:
        return NEUTRAL_BORDER
    return palette_color(cluster_id, CLUSTER_PALETTE)

def layer_color(layer: str) -> str:
    return palette_color(layer, LAYER_PALETTE)

# --------------------------- Geometry ---------------------------

def _cross(o: np.ndarray, a: np.ndarray, b: np.ndarray) -> float:
    return float((a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0]))

def convex_hull(points: Sequence[Pos]) -> Optional[np.ndarray]:
    """Convex hull by Andrew's monotone chain (NumPy-only).

    Parameters
    ----------
    points : Sequence[Pos]
        Input points; duplicates allowed.

    Returns
    -------
    Optional[np.ndarray]
        Hull vertices in counter-clockwise order, shape ``(k, 2)``, or
        None when there are fewer than three points or all of them are
        collinear.
    """
    if len(points) < MIN_HULL_POINTS:
        return None
    pts = np.unique(np.asarray(points, dtype=float), axis=0)  # sorted by x, then y
    if len(pts) < MIN_HULL_POINTS:
        return None

    lower: List[np.ndarray] = []
    for p in pts:
        while len(lower) >= 2 and _cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)
    upper: List[np.ndarray] = []
    for p in pts[::-1]:
        while len(upper) >= 2 and _cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)
    hull = np.array(lower[:-1] + upper[:-1])
    if len(hull) < MIN_HULL_POINTS:
        return None
    return hull

def polygon_centroid(poly: np.ndarray) -> np.ndarray:
    """Area centroid of a simple polygon; falls back to the vertex mean."""
    x, y = poly[:, 0], poly[:, 1]
    xn, yn = np.roll(x, -1), np.roll(y, -1)
    c = x * yn - xn * y
    area = c.sum() * 3.0
    if abs(area) < 1e-12:
        return poly.mean(axis=0)
    return np.array([((x + xn) * c).sum() / area, ((y + yn) * c).sum() / area])

def padded_hull(points: Sequence[Pos], padding: float = 40.0) -> Optional[np.ndarray]:
    """Convex hull pushed outward by ``padding`` along centroid -> vertex rays."""
    hull = convex_hull(points)
    if hull is None:
        return None
    centroid = polygon_centroid(hull)
    d = hull - centroid
    dist = np.sqrt((d ** 2).sum(axis=1))
    safe = np.where(dist == 0.0, 1.0, dist)
    offset = np.where(dist[:, None] == 0.0, 0.0, d / safe[:, None] * padding)
    return hull + offset

def cluster_hulls(
    positions: Mapping[str, Pos],
    clusters: Mapping[str, Optional[int]],
    padding: float = 40.0,
) -> Dict[int, np.ndarray]:
    """Padded hull per cluster with at least three positioned members.

    Parameters
    ----------
    positions : Mapping[str, Pos]
        Current position of every visible node.
    clusters : Mapping[str, Optional[int]]
        Cluster id per visible node (None for unclustered, which never
        contributes to any hull).
    padding : float
        Outward offset of each hull vertex.
    """
    groups: Dict[int, List[Pos]] = {}
    for nid, cid in clusters.items():
        if cid is None or nid not in positions:
            continue
        groups.setdefault(cid, []).append(positions[nid])
    out: Dict[int, np.ndarray] = {}
    for cid, pts in groups.items():
        poly = padded_hull(pts, padding)
        if poly is not None:
            out[cid] = poly
    return out

def is_simple_polygon(poly: np.ndarray) -> bool:
    """True if no two non-adjacent edges of the closed polygon intersect."""
    n = len(poly)
    if n < 3:
        return False

    def seg_cross(a, b, c, d) -> bool:
        d1 = _cross(c, d, a)
        d2 = _cross(c, d, b)
        d3 = _cross(a, b, c)
        d4 = _cross(a, b, d)
        return (d1 * d2 < 0) and (d3 * d4 < 0)

    for i in range(n):
        a, b = poly[i], poly[(i + 1) % n]
        for j in range(i + 1, n):
            if j == i or (j + 1) % n == i or j == (i + 1) % n:
                continue
            if seg_cross(a, b, poly[j], poly[(j + 1) % n]):
                return False
    return True

def contains_point(poly: np.ndarray, point: Pos) -> bool:
    """Ray-casting point-in-polygon test (boundary counts as inside)."""
    x, y = point
    inside = False
    n = len(poly)
    for i in range(n):
        x1, y1 = poly[i]
        x2, y2 = poly[(i + 1) % n]
        if abs(_cross(np.array([x1, y1]), np.array([x2, y2]), np.array([x, y]))) < 1e-9 \
                and min(x1, x2) - 1e-9 <= x <= max(x1, x2) + 1e-9 \
                and min(y1, y2) - 1e-9 <= y <= max(y1, y2) + 1e-9:
            return True
        if (y1 > y) != (y2 > y):
            xin = x1 + (y - y1) * (x2 - x1) / (y2 - y1)
            if x < xin:
                inside = not inside
    return inside


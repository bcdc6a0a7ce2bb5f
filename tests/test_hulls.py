import numpy as np
import pytest

from archlens.hulls import (
    NEUTRAL_BORDER,
    cluster_color,
    cluster_hulls,
    contains_point,
    convex_hull,
    is_simple_polygon,
    layer_color,
    padded_hull,
    polygon_centroid,
)


def test_fewer_than_three_points_have_no_hull():
    assert convex_hull([(0, 0), (1, 1)]) is None
    assert padded_hull([(0, 0), (0, 0), (0, 0)]) is None


def test_exactly_collinear_points_have_no_hull():
    assert convex_hull([(0, 0), (1, 1), (2, 2), (3, 3)]) is None


def test_square_hull_drops_interior_point():
    hull = convex_hull([(0, 0), (2, 0), (2, 2), (0, 2), (1, 1)])
    assert len(hull) == 4
    assert polygon_centroid(hull) == pytest.approx([1.0, 1.0])


def test_padding_pushes_vertices_outward():
    pts = [(0, 0), (100, 0), (0, 100)]
    hull = convex_hull(pts)
    padded = padded_hull(pts, padding=40)
    c = polygon_centroid(hull)
    grow = np.linalg.norm(padded - c, axis=1) - np.linalg.norm(hull - c, axis=1)
    assert grow == pytest.approx([40.0, 40.0, 40.0])


def test_near_collinear_hull_is_simple_and_encloses_members():
    rng = np.random.default_rng(7)
    xs = np.linspace(0, 500, 12)
    pts = [(x, 0.05 * rng.standard_normal()) for x in xs]
    poly = padded_hull(pts)
    assert poly is not None
    assert is_simple_polygon(poly)
    for p in pts:
        assert contains_point(poly, p)


def test_random_clusters_hulls_contain_members():
    rng = np.random.default_rng(11)
    pts = [tuple(p) for p in rng.normal(0, 80, size=(25, 2))]
    poly = padded_hull(pts, padding=40)
    assert is_simple_polygon(poly)
    assert all(contains_point(poly, p) for p in pts)


def test_cluster_hulls_skip_small_and_unclustered():
    positions = {"a": (0, 0), "b": (10, 0), "c": (0, 10), "d": (50, 50), "e": (60, 50), "f": (1, 1)}
    clusters = {"a": 1, "b": 1, "c": 1, "d": 2, "e": 2, "f": None}
    hulls = cluster_hulls(positions, clusters)
    assert set(hulls) == {1}


def test_colours_are_stable_and_neutral_for_unclustered():
    assert cluster_color(3) == cluster_color(3)
    assert cluster_color(None) == NEUTRAL_BORDER
    assert cluster_color(1).startswith("#") and len(cluster_color(1)) == 7
    assert layer_color("service") == layer_color("service")

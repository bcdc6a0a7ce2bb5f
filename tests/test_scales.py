import math

import pytest

from archlens.scales import SqrtScale, edge_weight, radius_scale, stroke_scale


def test_endpoints_map_to_range():
    s = radius_scale([1, 100, 50])
    assert s(1) == pytest.approx(5.0)
    assert s(100) == pytest.approx(40.0)


def test_area_proportional_to_metric():
    s = SqrtScale((0, 100), (0, 10))
    assert s(25) == pytest.approx(5.0)
    assert s(100) == pytest.approx(10.0)


def test_collapsed_domain_returns_midpoint():
    s = radius_scale([1, 1, 1])
    assert s(1) == pytest.approx(22.5)
    assert 5.0 <= s(1) <= 40.0


def test_empty_input_is_well_formed():
    s = stroke_scale([])
    assert math.isfinite(s(1))
    assert 1.0 <= s(7) <= 10.0


def test_values_are_clamped():
    s = stroke_scale([1, 9])
    assert s(0) == pytest.approx(1.0)
    assert s(1000) == pytest.approx(10.0)


def test_monotonic():
    s = radius_scale(range(1, 500))
    values = [s(v) for v in range(1, 500, 7)]
    assert values == sorted(values)


def test_edge_weight_is_mean_of_endpoints():
    assert edge_weight(10, 5) == pytest.approx(7.5)

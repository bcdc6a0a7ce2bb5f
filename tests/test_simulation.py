import itertools
import math

import numpy as np
import pytest

from archlens.config import SimulationConfig
from archlens.simulation import ForceSimulation, phyllotaxis


def _ring(n, radius=27.5, seed=0):
    sim = ForceSimulation(SimulationConfig(seed=seed))
    ids = [f"n{i}" for i in range(n)]
    links = [(ids[i], ids[(i + 1) % n]) for i in range(n)]
    sim.reset(ids, [radius] * n, links)
    sim.start()
    return sim, ids, links


def test_phyllotaxis_points_are_distinct():
    pts = {phyllotaxis(i) for i in range(50)}
    assert len(pts) == 50


def test_runs_to_rest_without_overlap():
    sim, ids, links = _ring(12)
    ticks = sim.run()
    assert not sim.running
    assert 0 < ticks <= sim.config.max_ticks
    assert np.isfinite(sim.x).all()
    for a, b in itertools.combinations(range(len(ids)), 2):
        d = np.linalg.norm(sim.x[a] - sim.x[b])
        assert d > 0.75 * (sim.radii[a] + sim.radii[b])


def test_edge_lengths_are_bounded():
    sim, ids, links = _ring(10)
    sim.run()
    for s, t in links:
        (x0, y0), (x1, y1) = sim.position(s), sim.position(t)
        assert math.hypot(x1 - x0, y1 - y0) < 4 * sim.config.link_distance


def test_layout_is_roughly_centred():
    sim, _, _ = _ring(8)
    sim.run()
    cx, cy = sim.x.mean(axis=0)
    assert abs(cx) < 1e-6 and abs(cy) < 1e-6


def test_pinned_node_stays_put():
    sim, ids, _ = _ring(6)
    sim.pin("n0", 300.0, -200.0)
    for _ in range(50):
        sim.step()
    assert sim.position("n0") == (300.0, -200.0)
    assert sim.is_pinned("n0")
    sim.unpin("n0")
    assert not sim.is_pinned("n0")
    assert sim.pins() == {}


def test_reheat_and_cool():
    sim, _, _ = _ring(5)
    sim.run()
    assert not sim.running
    sim.reheat()
    assert sim.running
    assert sim.alpha >= sim.config.reheat_target
    assert not sim.cooling
    # While held warm the simulation never stops on its own.
    for _ in range(sim.config.max_ticks + 10):
        assert sim.step()
    sim.cool()
    assert sim.cooling
    sim.run()
    assert not sim.running


def test_reset_keeps_known_positions_and_pins():
    sim, ids, links = _ring(4)
    sim.run()
    before = sim.positions()
    sim.reset(ids + ["new"], [27.5] * 5, links,
              positions=before, pins={"n1": (5.0, 5.0), "gone": (1.0, 1.0)})
    assert sim.position("n0") == pytest.approx(before["n0"])
    assert sim.position("n1") == (5.0, 5.0)
    assert sim.pins() == {"n1": (5.0, 5.0)}


def test_reset_drops_self_loops_and_unknown_links():
    sim = ForceSimulation()
    sim.reset(["a", "b"], [10, 10], [("a", "a"), ("a", "b"), ("a", "zz"), ("a", "b")])
    assert sim.links.tolist() == [[0, 1], [0, 1]]
    assert sim.bias.tolist() == [0.5, 0.5]


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError):
        ForceSimulation().reset(["a", "a"], [1, 1], [])


def test_empty_simulation_never_runs():
    sim = ForceSimulation()
    sim.reset([], [], [])
    sim.start()
    assert not sim.running
    assert sim.step() is False
    assert sim.run() == 0


def test_coincident_points_separate():
    sim = ForceSimulation(SimulationConfig(seed=3))
    sim.reset(["a", "b"], [20, 20], [], positions={"a": (0.0, 0.0), "b": (0.0, 0.0)})
    sim.start()
    sim.run()
    assert np.linalg.norm(sim.x[0] - sim.x[1]) > 20

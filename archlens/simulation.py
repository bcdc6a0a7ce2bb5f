"""Force-directed layout as an explicit, resumable stepper.

Each :meth:`ForceSimulation.step` is one relaxation tick:

1. alpha (temperature) moves toward ``alpha_target``;
2. link, many-body, centering and collision forces update velocities;
3. velocities decay and are integrated; pinned nodes snap to their pin.

The owner (the Qt canvas) calls ``step`` from its frame timer, so the
event loop regains control between ticks. Pairwise forces are computed
exactly with NumPy broadcasting, which is fine for a few hundred nodes.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .config import SimulationConfig

Pos = Tuple[float, float]
PosDict = Dict[str, Pos]

_GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


def phyllotaxis(index: int, initial_radius: float = 10.0) -> Pos:
    """Default initial placement of the ``index``-th node (sunflower spiral)."""
    r = initial_radius * math.sqrt(0.5 + index)
    a = index * _GOLDEN_ANGLE
    return (r * math.cos(a), r * math.sin(a))


class ForceSimulation:
    """Link + many-body + centering + collision simulation over 2D points.

    Typical use::

        sim = ForceSimulation(SimulationConfig())
        sim.reset(ids, radii, links, positions=previous, pins=pins)
        sim.start()
        while sim.step():
            ...  # draw

    Parameters
    ----------
    config : SimulationConfig
        Physics constants.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()
        self.rng = np.random.default_rng(self.config.seed)
        self.ids: List[str] = []
        self.index: Dict[str, int] = {}
        self.x = np.zeros((0, 2), dtype=float)
        self.v = np.zeros((0, 2), dtype=float)
        self.radii = np.zeros(0, dtype=float)
        self.links = np.zeros((0, 2), dtype=int)
        self.bias = np.zeros(0, dtype=float)
        self.fixed = np.zeros(0, dtype=bool)
        self.fixed_pos = np.zeros((0, 2), dtype=float)
        self.alpha = self.config.alpha
        self.alpha_target = self.config.alpha_target
        self.ticks = 0
        self.running = False

    # -------- Seeding --------
    def reset(
        self,
        ids: Sequence[str],
        radii: Sequence[float],
        links: Iterable[Tuple[str, str]],
        positions: Optional[Mapping[str, Pos]] = None,
        pins: Optional[Mapping[str, Pos]] = None,
    ) -> None:
        """Seed a fresh state for a new visible node / link set.

        Parameters
        ----------
        ids : Sequence[str]
            Node ids in a fixed order.
        radii : Sequence[float]
            Collision radius (scaled radius + margin) per node.
        links : Iterable[Tuple[str, str]]
            ``(source, target)`` pairs; pairs touching unknown ids and
            self-loops are ignored. Duplicates count twice.
        positions : Optional[Mapping[str, Pos]]
            Starting points for nodes that already had one; everyone else
            gets the phyllotaxis placement.
        pins : Optional[Mapping[str, Pos]]
            Pinned coordinates. Pins for ids not in ``ids`` are dropped.
        """
        positions = positions or {}
        pins = pins or {}
        n = len(ids)
        self.ids = list(ids)
        self.index = {nid: i for i, nid in enumerate(self.ids)}
        if len(self.index) != n:
            raise ValueError("node ids must be unique")

        self.radii = np.asarray(radii, dtype=float).reshape(n)
        self.x = np.zeros((n, 2), dtype=float)
        for i, nid in enumerate(self.ids):
            p = pins.get(nid) or positions.get(nid)
            self.x[i] = p if p is not None else phyllotaxis(i, self.config.initial_radius)
        self.v = np.zeros((n, 2), dtype=float)

        self.fixed = np.zeros(n, dtype=bool)
        self.fixed_pos = np.zeros((n, 2), dtype=float)
        for nid, p in pins.items():
            i = self.index.get(nid)
            if i is not None:
                self.fixed[i] = True
                self.fixed_pos[i] = p

        pairs = [
            (self.index[s], self.index[t])
            for s, t in links
            if s in self.index and t in self.index and s != t
        ]
        self.links = np.asarray(pairs, dtype=int).reshape(-1, 2)
        degree = np.bincount(self.links.ravel(), minlength=n).astype(float) if n else np.zeros(0)
        if len(self.links):
            ds = degree[self.links[:, 0]]
            dt = degree[self.links[:, 1]]
            self.bias = ds / (ds + dt)
        else:
            self.bias = np.zeros(0, dtype=float)

        self.alpha = self.config.alpha
        self.alpha_target = self.config.alpha_target
        self.ticks = 0
        self.running = False

    # -------- Lifecycle --------
    def start(self) -> None:
        self.ticks = 0
        self.running = bool(self.ids)

    def stop(self) -> None:
        self.running = False

    def reheat(self, target: Optional[float] = None) -> None:
        """Hold the temperature up (drag start) and resume stepping."""
        self.alpha_target = self.config.reheat_target if target is None else float(target)
        if self.alpha < self.alpha_target:
            self.alpha = self.alpha_target
        self.start()

    def cool(self) -> None:
        """Let the temperature decay back to rest (drag end)."""
        self.alpha_target = self.config.alpha_target
        self.ticks = 0

    @property
    def cooling(self) -> bool:
        return self.alpha_target < self.config.alpha_min

    @property
    def kinetic_energy(self) -> float:
        """Mean squared speed of the free nodes."""
        free = ~self.fixed
        if not free.any():
            return 0.0
        return float((self.v[free] ** 2).sum(axis=1).mean())

    # -------- Pins --------
    def pin(self, node_id: str, x: float, y: float) -> None:
        i = self.index[node_id]
        self.fixed[i] = True
        self.fixed_pos[i] = (x, y)
        self.x[i] = (x, y)
        self.v[i] = 0.0

    def unpin(self, node_id: str) -> None:
        i = self.index.get(node_id)
        if i is not None:
            self.fixed[i] = False

    def is_pinned(self, node_id: str) -> bool:
        i = self.index.get(node_id)
        return bool(i is not None and self.fixed[i])

    def pins(self) -> PosDict:
        return {self.ids[i]: (float(p[0]), float(p[1]))
                for i, p in enumerate(self.fixed_pos) if self.fixed[i]}

    # -------- Positions --------
    def position(self, node_id: str) -> Pos:
        p = self.x[self.index[node_id]]
        return (float(p[0]), float(p[1]))

    def positions(self) -> PosDict:
        return {nid: (float(p[0]), float(p[1])) for nid, p in zip(self.ids, self.x)}

    # -------- Ticking --------
    def step(self) -> bool:
        """Advance one tick. Returns False once the simulation is at rest."""
        if not self.running:
            return False
        cfg = self.config
        self.alpha += (self.alpha_target - self.alpha) * cfg.alpha_decay
        alpha = self.alpha

        self._force_link(alpha)
        self._force_many_body(alpha)
        self._force_position(alpha)
        self._force_collide()

        free = ~self.fixed
        self.v[free] *= (1.0 - cfg.velocity_decay)
        self.x[free] += self.v[free]
        self.x[self.fixed] = self.fixed_pos[self.fixed]
        self.v[self.fixed] = 0.0
        self._force_center()

        self.ticks += 1
        if self.cooling and (
            self.alpha < cfg.alpha_min
            or self.ticks >= cfg.max_ticks
            or (self.ticks > 1 and self.kinetic_energy < cfg.energy_threshold)
        ):
            self.running = False
        return self.running

    def run(self, max_ticks: Optional[int] = None) -> int:
        """Step synchronously until rest (or ``max_ticks``). Returns ticks taken."""
        if not self.running:
            self.start()
        limit = self.config.max_ticks if max_ticks is None else max_ticks
        taken = 0
        while self.running and taken < limit:
            self.step()
            taken += 1
        return taken

    # -------- Forces --------
    def _jiggle(self, shape) -> np.ndarray:
        return (self.rng.random(shape) - 0.5) * 1e-6

    def _force_link(self, alpha: float) -> None:
        if not len(self.links):
            return
        s, t = self.links[:, 0], self.links[:, 1]
        d = (self.x[t] + self.v[t]) - (self.x[s] + self.v[s])
        zero = (d == 0.0)
        if zero.any():
            d[zero] = self._jiggle(int(zero.sum()))
        length = np.sqrt((d ** 2).sum(axis=1))
        k = (length - self.config.link_distance) / length * alpha * self.config.link_strength
        d *= k[:, None]
        b = self.bias[:, None]
        np.add.at(self.v, t, -d * b)
        np.add.at(self.v, s, d * (1.0 - b))

    def _force_many_body(self, alpha: float) -> None:
        n = len(self.ids)
        if n < 2:
            return
        diff = self.x[None, :, :] - self.x[:, None, :]  # diff[i, j] = x_j - x_i
        d2 = (diff ** 2).sum(axis=2)
        dmin2 = self.config.charge_distance_min ** 2
        near = d2 < dmin2
        d2 = np.where(near, np.sqrt(dmin2 * d2), d2)
        np.fill_diagonal(d2, np.inf)
        d2 = np.maximum(d2, 1e-12)
        w = self.config.charge * alpha / d2
        self.v += (diff * w[:, :, None]).sum(axis=1)

    def _force_position(self, alpha: float) -> None:
        k = self.config.center_strength * alpha
        if k:
            self.v -= self.x * k

    def _force_center(self) -> None:
        """Shift free nodes so the whole layout stays centred on the origin."""
        free = ~self.fixed
        if not free.any() or self.fixed.any():
            # Shifting would move nodes relative to a pinned one.
            return
        self.x -= self.x.mean(axis=0)

    def _force_collide(self) -> None:
        n = len(self.ids)
        if n < 2 or self.config.collision_strength <= 0:
            return
        r = self.radii
        p = self.x + self.v
        diff = p[:, None, :] - p[None, :, :]  # diff[i, j] = p_i - p_j
        d2 = (diff ** 2).sum(axis=2)
        rr = r[:, None] + r[None, :]
        overlap = np.triu(d2 < rr ** 2, k=1)
        if not overlap.any():
            return
        ii, jj = np.nonzero(overlap)
        dxy = diff[ii, jj]
        zero = (dxy == 0.0)
        if zero.any():
            dxy[zero] = self._jiggle(int(zero.sum()))
        dist = np.sqrt((dxy ** 2).sum(axis=1))
        rsum = rr[ii, jj]
        k = (rsum - dist) / dist * self.config.collision_strength
        dxy *= k[:, None]
        ri2 = r[ii] ** 2
        rj2 = r[jj] ** 2
        wi = (rj2 / (ri2 + rj2))[:, None]
        np.add.at(self.v, ii, dxy * wi)
        np.add.at(self.v, jj, -dxy * (1.0 - wi))

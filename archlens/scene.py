"""The visible graph: filtered nodes/edges, scales, positions and hulls.

``GraphScene`` is the single owner of the node / edge / position store.
Every input change (data load, filter toggle, membership edit) goes
through :meth:`GraphScene.rebuild`, which finishes before the next
:meth:`GraphScene.tick` reads the visible set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import networkx as nx
import numpy as np

from .config import RenderConfig, SimulationConfig
from .filters import FilterEngine
from .hulls import cluster_hulls
from .membership import ProposalStore
from .model import Component, ComponentsData
from .scales import SqrtScale, edge_weight, radius_scale, stroke_scale
from .simulation import ForceSimulation, Pos, PosDict


@dataclass(frozen=True)
class ViewNode:
    id: str
    layer: str
    loc: int
    cluster_id: Optional[int]
    x: float
    y: float
    radius: float
    pinned: bool


@dataclass(frozen=True)
class ViewEdge:
    source: str
    target: str
    weight: float
    width: float


def _noop_log(msg: str) -> None:
    pass


class GraphScene:
    """Derived, renderable state of the component graph.

    Parameters
    ----------
    data : ComponentsData
        Component inventory (read-only).
    store : ProposalStore
        Shared cluster membership; read on every rebuild.
    sim_config, render_config :
        Physics and rendering constants.
    log : Callable[[str], None]
        Sink for ``[tag] message`` lines.
    """

    def __init__(
        self,
        data: Optional[ComponentsData] = None,
        store: Optional[ProposalStore] = None,
        sim_config: Optional[SimulationConfig] = None,
        render_config: Optional[RenderConfig] = None,
        log: Callable[[str], None] = _noop_log,
    ):
        self.render_config = render_config or RenderConfig()
        self.sim = ForceSimulation(sim_config)
        self.filters = FilterEngine()
        self._log = log
        self.data = ComponentsData()
        self.store = ProposalStore()
        self.components: Dict[str, Component] = {}
        self.graph: nx.MultiDiGraph = nx.MultiDiGraph()
        self.node_radius: SqrtScale = radius_scale(())
        self.edge_width: SqrtScale = stroke_scale(())
        self.hulls: Dict[int, np.ndarray] = {}
        self.version = 0
        if data is not None:
            self.load(data, store or ProposalStore())

    # -------- Inputs --------
    def load(self, data: ComponentsData, store: ProposalStore) -> None:
        """Take a fresh analysis. All pins and positions are discarded."""
        dropped = len(self.sim.pins())
        if dropped:
            self._log(f"[layout] data reload released {dropped} pinned node(s)")
        self.data = data
        self.store = store
        self.components = data.by_id()
        self.filters = FilterEngine()
        self.filters.set_known_from(data.components, store.cluster_ids)
        self.sim.reset([], [], [])
        self.rebuild()

    def set_sim_config(self, config: SimulationConfig) -> None:
        """Swap physics constants, keeping current positions and pins."""
        positions, pins = self.sim.positions(), self.sim.pins()
        self.sim = ForceSimulation(config)
        self._reseed(positions, pins)

    def sync_known(self) -> bool:
        """Re-read known layers / clusters (e.g. after proposals changed)."""
        return self.filters.set_known_from(self.data.components, self.store.cluster_ids)

    # -------- Rebuild --------
    def rebuild(self) -> None:
        """Recompute the visible graph and reseed the simulation.

        Nodes that stay visible keep their position and pins, so the
        layout stays stable under live filtering.
        """
        self.sync_known()
        self._reseed(self.sim.positions(), self.sim.pins())

    def _reseed(self, positions: PosDict, pins: PosDict) -> None:
        visible = self.filters.visible_components(self.data.components, self.store.cluster_of)
        G = nx.MultiDiGraph()
        for comp, layer, cid in visible:
            G.add_node(comp.id, layer=layer, loc=comp.loc, cluster=cid)
        for e in self.filters.visible_edges(self.data.edges, set(G.nodes())):
            G.add_edge(e.source, e.target,
                       weight=edge_weight(G.nodes[e.source]["loc"], G.nodes[e.target]["loc"]))

        rc = self.render_config
        self.node_radius = radius_scale((d["loc"] for _, d in G.nodes(data=True)), rc.radius_range)
        self.edge_width = stroke_scale((d["weight"] for _, _, d in G.edges(data=True)), rc.stroke_range)
        for n, d in G.nodes(data=True):
            d["radius"] = self.node_radius(d["loc"])
        self.graph = G

        ids = list(G.nodes())
        margin = self.sim.config.collision_margin
        radii = [G.nodes[n]["radius"] + margin for n in ids]
        self.sim.reset(ids, radii, G.edges(), positions=positions, pins=pins)
        self.sim.start()
        self.hulls = self._compute_hulls()
        self.version += 1
        self._log(f"[filter] visible nodes={G.number_of_nodes()}, edges={G.number_of_edges()}, "
                  f"hulls={len(self.hulls)}")

    # -------- Ticking --------
    def tick(self) -> bool:
        """One simulation step followed by a hull refresh. False once at rest."""
        running = self.sim.step()
        self.hulls = self._compute_hulls()
        return running

    def _compute_hulls(self) -> Dict[int, np.ndarray]:
        clusters = {n: d["cluster"] for n, d in self.graph.nodes(data=True)}
        return cluster_hulls(self.sim.positions(), clusters, self.render_config.hull_padding)

    # -------- Views --------
    @property
    def running(self) -> bool:
        return self.sim.running

    def visible_ids(self) -> List[str]:
        return list(self.graph.nodes())

    def node(self, node_id: str) -> ViewNode:
        d = self.graph.nodes[node_id]
        x, y = self.sim.position(node_id)
        return ViewNode(node_id, d["layer"], d["loc"], d["cluster"], x, y,
                        d["radius"], self.sim.is_pinned(node_id))

    def nodes(self) -> List[ViewNode]:
        return [self.node(n) for n in self.graph.nodes()]

    def edges(self) -> List[ViewEdge]:
        return [ViewEdge(u, v, d["weight"], self.edge_width(d["weight"]))
                for u, v, d in self.graph.edges(data=True)]

    def segments(self) -> List[Tuple[Pos, Pos]]:
        pos = self.sim.positions()
        return [(pos[u], pos[v]) for u, v in self.graph.edges()]

    def node_at(self, x: float, y: float, slop: float = 0.0) -> Optional[str]:
        """Topmost visible node whose disk contains world point ``(x, y)``."""
        if not self.graph.number_of_nodes():
            return None
        ids = self.sim.ids
        d2 = ((self.sim.x - np.array([x, y])) ** 2).sum(axis=1)
        r = np.array([self.graph.nodes[n]["radius"] for n in ids]) + slop
        hits = np.nonzero(d2 <= r ** 2)[0]
        if not len(hits):
            return None
        return ids[int(hits[-1])]  # drawn last == on top

    def extent(self, pad: float = 60.0) -> Tuple[float, float, float, float]:
        """Bounding box ``(xmin, xmax, ymin, ymax)`` of nodes and hulls."""
        chunks = [p for p in [self.sim.x, *self.hulls.values()] if len(p)]
        allp = np.vstack(chunks) if chunks else np.zeros((1, 2))
        return (float(allp[:, 0].min() - pad), float(allp[:, 0].max() + pad),
                float(allp[:, 1].min() - pad), float(allp[:, 1].max() + pad))

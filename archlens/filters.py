"""Layer / cluster visibility filtering."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .layers import classify, layer_sort_key
from .model import Component, Edge


class FilterEngine:
    """Active layer and cluster selections, and the visible subset they imply.

    Both selections default to every known value. They are reset to the
    full set whenever :meth:`set_known` sees a different set of known
    layers or clusters (e.g. a fresh analysis); otherwise edits survive.
    """

    def __init__(self) -> None:
        self.known_layers: List[str] = []
        self.known_clusters: List[int] = []
        self.selected_layers: Set[str] = set()
        self.selected_clusters: Set[int] = set()

    # -------- Known values --------
    def set_known(self, layers: Iterable[str], clusters: Iterable[int]) -> bool:
        """Update the known value sets. Returns True if selections were reset."""
        layers = sorted(set(layers), key=layer_sort_key)
        clusters = list(dict.fromkeys(clusters))
        reset = False
        if set(layers) != set(self.known_layers):
            self.selected_layers = set(layers)
            reset = True
        if set(clusters) != set(self.known_clusters):
            self.selected_clusters = set(clusters)
            reset = True
        self.known_layers = layers
        self.known_clusters = clusters
        return reset

    def set_known_from(self, components: Iterable[Component], cluster_ids: Iterable[int]) -> bool:
        return self.set_known((classify(c.id, c.layer) for c in components), cluster_ids)

    # -------- Edits --------
    def toggle_layer(self, layer: str) -> None:
        if layer in self.selected_layers:
            self.selected_layers.discard(layer)
        else:
            self.selected_layers.add(layer)

    def toggle_cluster(self, cluster_id: int) -> None:
        if cluster_id in self.selected_clusters:
            self.selected_clusters.discard(cluster_id)
        else:
            self.selected_clusters.add(cluster_id)

    def select_all_layers(self) -> None:
        self.selected_layers = set(self.known_layers)

    def select_no_layers(self) -> None:
        self.selected_layers = set()

    def select_all_clusters(self) -> None:
        self.selected_clusters = set(self.known_clusters)

    def select_no_clusters(self) -> None:
        self.selected_clusters = set()

    # -------- Derivation --------
    def is_visible(self, layer: str, cluster_id: Optional[int]) -> bool:
        """Layer must be selected; unclustered nodes ignore the cluster filter."""
        if layer not in self.selected_layers:
            return False
        return cluster_id is None or cluster_id in self.selected_clusters

    def visible_components(
        self,
        components: Sequence[Component],
        cluster_of: Callable[[str], Optional[int]],
    ) -> List[Tuple[Component, str, Optional[int]]]:
        """Visible components with their classified layer and cluster id, in input order."""
        out: List[Tuple[Component, str, Optional[int]]] = []
        for c in components:
            layer = classify(c.id, c.layer)
            cid = cluster_of(c.id)
            if self.is_visible(layer, cid):
                out.append((c, layer, cid))
        return out

    @staticmethod
    def visible_edges(edges: Iterable[Edge], visible_ids: Iterable[str]) -> List[Edge]:
        """Edges whose two endpoints are both visible; dangling edges drop out here."""
        ids = visible_ids if isinstance(visible_ids, (set, frozenset, dict)) else set(visible_ids)
        return [e for e in edges if e.source in ids and e.target in ids]

    def summary(self) -> Dict[str, str]:
        return {
            "layers": f"{len(self.selected_layers & set(self.known_layers))} of {len(self.known_layers)}",
            "clusters": f"{len(self.selected_clusters & set(self.known_clusters))} of {len(self.known_clusters)}",
        }

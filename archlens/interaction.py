"""Pan/zoom transform and the node interaction model (hover, drag, inspect, reassign)."""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from .errors import UnknownClusterError, UnknownComponentError
from .legend import ComponentDetail, component_detail, tooltip_text
from .model import Component, Proposal
from .scene import GraphScene

Pos = Tuple[float, float]


class ViewTransform:
    """Uniform-scale + translate transform between world and screen.

    Screen coordinates are pixel offsets from the centre of the viewport,
    with the same axis orientation as world coordinates. The transform
    never touches simulation state.
    """

    def __init__(self, scale_extent: Tuple[float, float] = (0.1, 8.0)):
        self.min_scale, self.max_scale = scale_extent
        self.k = 1.0
        self.tx = 0.0
        self.ty = 0.0

    def clamp(self, k: float) -> float:
        return min(self.max_scale, max(self.min_scale, k))

    def apply(self, x: float, y: float) -> Pos:
        return (x * self.k + self.tx, y * self.k + self.ty)

    def invert(self, sx: float, sy: float) -> Pos:
        return ((sx - self.tx) / self.k, (sy - self.ty) / self.k)

    def zoom_at(self, sx: float, sy: float, factor: float) -> None:
        """Scale by ``factor`` (clamped) keeping the world point under ``(sx, sy)`` fixed."""
        wx, wy = self.invert(sx, sy)
        self.k = self.clamp(self.k * factor)
        self.tx = sx - wx * self.k
        self.ty = sy - wy * self.k

    def pan(self, dx: float, dy: float) -> None:
        self.tx += dx
        self.ty += dy

    def fit(self, extent: Tuple[float, float, float, float], width: float, height: float) -> None:
        """Centre and scale so ``extent`` (xmin, xmax, ymin, ymax) fills the viewport."""
        xmin, xmax, ymin, ymax = extent
        w, h = max(xmax - xmin, 1e-9), max(ymax - ymin, 1e-9)
        self.k = self.clamp(min(width / w, height / h))
        cx, cy = (xmin + xmax) / 2.0, (ymin + ymax) / 2.0
        self.tx, self.ty = -cx * self.k, -cy * self.k

    def window(self, width: float, height: float) -> Tuple[float, float, float, float]:
        """World rectangle ``(xmin, xmax, ymin, ymax)`` visible in a viewport."""
        x0, y0 = self.invert(-width / 2.0, -height / 2.0)
        x1, y1 = self.invert(width / 2.0, height / 2.0)
        return (x0, x1, y0, y1)


def _noop_log(msg: str) -> None:
    pass


class InteractionController:
    """Translates pointer gestures into scene / membership operations.

    Parameters
    ----------
    scene : GraphScene
        The scene whose simulation is pinned / reheated by drags.
    log : Callable[[str], None]
        Sink for ``[tag] message`` lines.
    """

    def __init__(self, scene: GraphScene, log: Callable[[str], None] = _noop_log):
        self.scene = scene
        self.transform = ViewTransform(scene.render_config.zoom_extent)
        self._log = log
        self.hovered: Optional[str] = None
        self.dragging: Optional[str] = None

    # -------- Hover --------
    def hover(self, node_id: Optional[str]) -> Optional[str]:
        """Tooltip text for ``node_id`` (None hides the tooltip)."""
        self.hovered = node_id
        if node_id is None or node_id not in self.scene.graph:
            return None
        n = self.scene.node(node_id)
        return tooltip_text(n.id, self.scene.store.cluster_name(n.id), n.layer, n.loc)

    def leave(self) -> None:
        self.hovered = None

    # -------- Drag --------
    def drag_start(self, node_id: str) -> None:
        """Pin the node where it is and reheat so its neighbours react."""
        sim = self.scene.sim
        if self.dragging is not None:
            self.drag_end()
        x, y = sim.position(node_id)
        sim.pin(node_id, x, y)
        sim.reheat()
        self.dragging = node_id
        self._log(f"[layout] pinned {node_id} at ({x:.0f}, {y:.0f})")

    def drag_move(self, x: float, y: float) -> None:
        if self.dragging is None:
            return
        sim = self.scene.sim
        if not sim.is_pinned(self.dragging):
            # The pin was dropped underneath us (reload or node filtered out).
            self._log(f"[layout] drag on {self.dragging} cancelled: node no longer pinned")
            self.dragging = None
            return
        sim.pin(self.dragging, x, y)
        if not sim.running:
            sim.reheat()

    def drag_end(self) -> None:
        """Release the pin and let the layout cool back to rest."""
        if self.dragging is None:
            return
        if self.dragging in self.scene.sim.index:
            self.scene.sim.unpin(self.dragging)
            self.scene.sim.cool()
        self._log(f"[layout] released {self.dragging}")
        self.dragging = None

    def cancel_drag(self) -> None:
        """Forget an in-progress drag without touching the simulation."""
        if self.dragging is not None:
            self._log(f"[layout] drag on {self.dragging} cancelled")
        self.dragging = None

    # -------- Inspect / reassign --------
    def component(self, component_id: str) -> Component:
        comp = self.scene.components.get(component_id)
        if comp is None:
            raise UnknownComponentError(component_id)
        return comp

    def inspect(self, component_id: str) -> ComponentDetail:
        return component_detail(self.component(component_id), self.scene.store)

    def can_reassign(self, component_id: str, target_id: Optional[int]) -> bool:
        store = self.scene.store
        return (
            target_id is not None
            and store.has_cluster(target_id)
            and store.cluster_of(component_id) != target_id
        )

    def reassign(self, component_id: str, target_id: int) -> Tuple[Proposal, ...]:
        """Move a component to another proposal and rebuild the visible graph.

        Raises
        ------
        UnknownComponentError
            ``component_id`` is not in the inventory.
        UnknownClusterError
            ``target_id`` names no proposal. Membership is untouched.
        """
        comp = self.component(component_id)
        if not self.scene.store.has_cluster(target_id):
            raise UnknownClusterError(target_id)
        before = self.scene.store.cluster_of(component_id)
        proposals = self.scene.store.reassign(comp, target_id)
        if before != target_id:
            self.scene.rebuild()
        return proposals

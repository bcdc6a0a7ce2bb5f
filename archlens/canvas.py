"""Matplotlib canvas embedded in Qt that animates and renders a ``GraphScene``."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from PyQt6.QtCore import QTimer, pyqtSignal
from PyQt6.QtWidgets import QWidget

from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg
from matplotlib.collections import EllipseCollection, LineCollection
from matplotlib.figure import Figure
from matplotlib.patches import Patch, Polygon

from .hulls import cluster_color, layer_color
from .interaction import InteractionController
from .legend import cluster_legend, layer_legend
from .scene import GraphScene

CLICK_SLOP_PX = 4.0
FIT_AFTER_FRAMES = 30


class GraphCanvas(FigureCanvasQTAgg):
    """Interactive graph surface.

    Owns the frame timer that steps the scene's simulation. Wheel zooms
    about the cursor, dragging the background pans, dragging a node pins
    it, hovering shows a tooltip, and a click without movement emits
    :attr:`node_clicked`.
    """

    node_clicked = pyqtSignal(str)
    settled = pyqtSignal()
    render_skipped = pyqtSignal(str)

    def __init__(self, scene: GraphScene, controller: InteractionController,
                 parent: Optional[QWidget] = None):
        """Create a borderless single-axes figure and wire mouse handlers."""
        self.rc = scene.render_config
        fig = Figure(facecolor=self.rc.background)
        super().__init__(fig)
        self.setParent(parent)
        self.scene = scene
        self.controller = controller
        self.ax = self.figure.add_axes((0.0, 0.0, 1.0, 1.0))
        self.ax.set_axis_off()

        self.show_labels = False
        self.show_legend = True
        self.ticks_per_frame = max(1, self.rc.ticks_per_frame)
        self._active = False
        self._pending = False
        self._needs_fit = True
        self._fit_countdown = 0
        self._built_version = -1

        self._edges: Optional[LineCollection] = None
        self._nodes: Optional[EllipseCollection] = None
        self._hulls: Dict[int, Polygon] = {}
        self._labels: List = []
        self._tip = None

        self._press: Optional[Tuple[float, float, Optional[str]]] = None
        self._pan_from: Optional[Tuple[float, float]] = None

        self.timer = QTimer(self)
        self.timer.setInterval(self.rc.frame_interval_ms)
        self.timer.timeout.connect(self._on_frame)

        self.mpl_connect("button_press_event", self._on_press)
        self.mpl_connect("motion_notify_event", self._on_motion)
        self.mpl_connect("button_release_event", self._on_release)
        self.mpl_connect("scroll_event", self._on_scroll)
        self.mpl_connect("figure_leave_event", self._on_leave)

    # -------- Lifecycle --------
    @property
    def active(self) -> bool:
        return self._active

    def activate(self) -> None:
        """Host view became visible: rebuild from current inputs and animate."""
        self._active = True
        self.scene.rebuild()
        self.render_scene()

    def deactivate(self) -> None:
        """Host view hidden: stop the stepper so no cycles are spent."""
        self._active = False
        self.timer.stop()
        self.scene.sim.stop()

    def refresh(self, fit: bool = False) -> None:
        """Inputs changed: rebuild now (if visible) and restart the animation."""
        if fit:
            self._needs_fit = True
        if not self._active:
            self._pending = True
            return
        self.scene.rebuild()
        self.render_scene()

    def render_scene(self) -> None:
        """(Re)create all artists for the current visible set, then animate."""
        if not self._has_area():
            self._pending = True
            self.render_skipped.emit("viewport has zero size; will retry")
            return
        self._pending = False
        self._build_artists()
        self._fit_countdown = FIT_AFTER_FRAMES
        if self._needs_fit and not self.scene.running:
            self._fit_now()
        self._apply_transform()
        self.draw_idle()
        self._ensure_timer()

    def _has_area(self) -> bool:
        return self.width() > 0 and self.height() > 0

    def _ensure_timer(self) -> None:
        if self._active and self.scene.running and not self.timer.isActive():
            self.timer.start()

    def _on_frame(self) -> None:
        if not self._active:
            self.timer.stop()
            return
        if self.scene.version != self._built_version:
            self._build_artists()
        running = False
        for _ in range(self.ticks_per_frame):
            running = self.scene.tick()
            if not running:
                break
        self._update_artists()
        if self._needs_fit:
            self._fit_countdown -= 1
            if self._fit_countdown <= 0 or not running:
                self._fit_now()
        self.draw_idle()
        if not running and self.controller.dragging is None:
            self.timer.stop()
            self.settled.emit()

    # -------- Qt events --------
    def resizeEvent(self, event):
        """Keep the world scale when the widget is resized; retry a skipped render."""
        super().resizeEvent(event)
        if self._pending and self._active:
            self.render_scene()
        else:
            self._apply_transform()

    def showEvent(self, event):
        super().showEvent(event)
        if self._pending and self._active:
            self.render_scene()

    # -------- Artists --------
    def _build_artists(self) -> None:
        ax = self.ax
        ax.clear()
        ax.set_axis_off()
        self._hulls = {}
        self._labels = []
        nodes = self.scene.nodes()
        edges = self.scene.edges()

        self._edges = LineCollection(
            self.scene.segments(),
            linewidths=[e.width for e in edges] or 1.0,
            colors=self.rc.edge_color,
            alpha=self.rc.edge_alpha,
            zorder=1,
        )
        ax.add_collection(self._edges)

        diam = [2.0 * n.radius for n in nodes]
        self._nodes = EllipseCollection(
            diam, diam, [0.0] * len(nodes),
            units="xy",
            offsets=[(n.x, n.y) for n in nodes] or None,
            offset_transform=ax.transData,
            facecolors=[layer_color(n.layer) for n in nodes],
            edgecolors=[cluster_color(n.cluster_id) for n in nodes],
            linewidths=self.rc.node_border_width,
            zorder=3,
        )
        ax.add_collection(self._nodes)

        if self.show_labels:
            for n in nodes:
                self._labels.append(ax.text(n.x, n.y, n.id.rsplit(".", 1)[-1], fontsize=7,
                                            ha="center", va="center", zorder=4, clip_on=True))

        self._tip = ax.annotate(
            "", xy=(0, 0), xytext=(15, -10), textcoords="offset points",
            fontsize=8, va="top", zorder=10,
            bbox=dict(boxstyle="round", fc="#ffffff", ec="#888888", alpha=0.95),
        )
        self._tip.set_visible(False)

        if self.show_legend:
            self._draw_legend()
        self._update_hulls()
        self._apply_transform()
        self._built_version = self.scene.version

    def _draw_legend(self) -> None:
        """Layer fill legend (upper left) and cluster border legend (upper right)."""
        layers = self.scene.filters.known_layers
        fill = [Patch(facecolor=e.color, edgecolor="#333333", label=e.label) for e in layer_legend(layers)]
        border = [Patch(facecolor="none", edgecolor=e.color, linewidth=3, label=e.label)
                  for e in cluster_legend(self.scene.store)]
        if fill:
            lg = self.ax.legend(handles=fill, title="Layers (fill)", loc="upper left",
                                fontsize=7, title_fontsize=8, frameon=True)
            self.ax.add_artist(lg)
        if border:
            self.ax.legend(handles=border, title="Clusters (border)", loc="upper right",
                           fontsize=7, title_fontsize=8, frameon=True)

    def _update_hulls(self) -> None:
        hulls = self.scene.hulls
        for cid in list(self._hulls):
            if cid not in hulls:
                self._hulls.pop(cid).remove()
        for cid, poly in hulls.items():
            patch = self._hulls.get(cid)
            if patch is None:
                color = cluster_color(cid)
                patch = Polygon(poly, closed=True, facecolor=color, edgecolor=color,
                                linewidth=self.rc.hull_stroke_width, joinstyle="round",
                                alpha=self.rc.hull_alpha, zorder=0)
                self.ax.add_patch(patch)
                self._hulls[cid] = patch
            else:
                patch.set_xy(poly)

    def _update_artists(self) -> None:
        if self._nodes is None or self._edges is None:
            return
        positions = self.scene.sim.x
        if len(positions):
            self._nodes.set_offsets(positions)
        self._edges.set_segments(self.scene.segments())
        for text, (x, y) in zip(self._labels, positions):
            text.set_position((x, y))
        self._update_hulls()

    # -------- View transform --------
    def _viewport(self) -> Tuple[float, float]:
        bbox = self.figure.bbox
        return float(bbox.width), float(bbox.height)

    def _apply_transform(self) -> None:
        w, h = self._viewport()
        if w <= 0 or h <= 0:
            return
        x0, x1, y0, y1 = self.controller.transform.window(w, h)
        self.ax.set_xlim(x0, x1)
        self.ax.set_ylim(y0, y1)

    def fit_view(self) -> None:
        w, h = self._viewport()
        if w > 0 and h > 0:
            self.controller.transform.fit(self.scene.extent(), w, h)
            self._apply_transform()
            self.draw_idle()

    def _fit_now(self) -> None:
        """Frame the layout once it has had a few frames to spread out."""
        if self.scene.graph.number_of_nodes():
            self.fit_view()
            self._needs_fit = False

    def _screen(self, event) -> Tuple[float, float]:
        w, h = self._viewport()
        return event.x - w / 2.0, event.y - h / 2.0

    def _world(self, event) -> Tuple[float, float]:
        return self.controller.transform.invert(*self._screen(event))

    # -------- Mouse handlers --------
    def _on_press(self, event) -> None:
        if event.button != 1:
            return
        wx, wy = self._world(event)
        hit = self.scene.node_at(wx, wy)
        self._press = (event.x, event.y, hit)
        if hit is not None:
            self._hide_tip()
            self.controller.drag_start(hit)
            self._ensure_timer()
        else:
            self._pan_from = (event.x, event.y)

    def _on_motion(self, event) -> None:
        if self.controller.dragging is not None:
            self.controller.drag_move(*self._world(event))
            self._ensure_timer()
            return
        if self._pan_from is not None:
            px, py = self._pan_from
            self.controller.transform.pan(event.x - px, event.y - py)
            self._pan_from = (event.x, event.y)
            self._apply_transform()
            self.draw_idle()
            return
        self._hover(event)

    def _on_release(self, event) -> None:
        if event.button != 1:
            return
        press, self._press = self._press, None
        self._pan_from = None
        if self.controller.dragging is not None:
            self.controller.drag_end()
            self._ensure_timer()
        if press is not None and press[2] is not None:
            moved = abs(event.x - press[0]) + abs(event.y - press[1])
            if moved <= CLICK_SLOP_PX:
                self.node_clicked.emit(press[2])

    def _on_scroll(self, event) -> None:
        step = self.rc.zoom_step
        factor = step if event.button == "up" else 1.0 / step
        self.controller.transform.zoom_at(*self._screen(event), factor)
        self._apply_transform()
        self.draw_idle()

    def _on_leave(self, event) -> None:
        self.controller.leave()
        self._hide_tip()

    def _hover(self, event) -> None:
        if self._tip is None:
            return
        wx, wy = self._world(event)
        text = self.controller.hover(self.scene.node_at(wx, wy))
        if text is None:
            self._hide_tip()
            return
        self._tip.set_text(text)
        self._tip.xy = (wx, wy)
        self._tip.set_visible(True)
        self.draw_idle()

    def _hide_tip(self) -> None:
        if self._tip is not None and self._tip.get_visible():
            self._tip.set_visible(False)
            self.draw_idle()

    # -------- Export --------
    def export(self, path: str, dpi: int = 200) -> None:
        self.figure.savefig(path, dpi=dpi, facecolor=self.figure.get_facecolor())

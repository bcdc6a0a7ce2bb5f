"""Tunable constants for the layout physics and the renderer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class SimulationConfig:
    """Force layout parameters.

    Attributes
    ----------
    link_distance : float
        Rest length of a dependency spring.
    link_strength : float
        Fraction of the length error corrected per tick (times alpha).
    charge : float
        Many-body strength; negative repels.
    charge_distance_min : float
        Distances below this are softened to avoid singular forces.
    center_strength : float
        Pull of every node toward the origin on each axis.
    collision_margin : float
        Added to a node's radius to get its collision disk.
    collision_strength : float
        Share of an overlap resolved per tick, in ``[0, 1]``.
    alpha, alpha_min, alpha_decay, alpha_target : float
        Temperature schedule: alpha moves toward ``alpha_target`` by
        ``alpha_decay`` each tick; a cooling run stops below ``alpha_min``.
    velocity_decay : float
        Friction; velocities are multiplied by ``1 - velocity_decay``.
    reheat_target : float
        Temperature held while a node is being dragged.
    energy_threshold : float
        A cooling run also stops once mean squared speed drops below this.
    max_ticks : int
        Tick budget for a cooling run.
    initial_radius : float
        Scale of the phyllotaxis spiral used to place new nodes.
    seed : Optional[int]
        Seed for the jiggle RNG (coincident points); None for fresh entropy.
    """
    link_distance: float = 100.0
    link_strength: float = 0.5
    charge: float = -250.0
    charge_distance_min: float = 1.0
    center_strength: float = 0.05
    collision_margin: float = 5.0
    collision_strength: float = 1.0
    alpha: float = 1.0
    alpha_min: float = 0.001
    alpha_decay: float = 1.0 - 0.001 ** (1.0 / 300.0)
    alpha_target: float = 0.0
    velocity_decay: float = 0.4
    reheat_target: float = 0.3
    energy_threshold: float = 1e-4
    max_ticks: int = 600
    initial_radius: float = 10.0
    seed: Optional[int] = None


@dataclass(frozen=True)
class RenderConfig:
    radius_range: Tuple[float, float] = (5.0, 40.0)
    stroke_range: Tuple[float, float] = (1.0, 10.0)
    hull_padding: float = 40.0
    zoom_extent: Tuple[float, float] = (0.1, 8.0)
    zoom_step: float = 1.2
    frame_interval_ms: int = 16
    ticks_per_frame: int = 1
    edge_color: str = "#999999"
    edge_alpha: float = 0.6
    node_border_width: float = 2.5
    hull_alpha: float = 0.15
    hull_stroke_width: float = 15.0
    background: str = "#f4f4f5"

"""Architectural layer inference for components."""

from __future__ import annotations

from typing import Optional, Tuple

CONTROLLER = "controller"
SERVICE = "service"
REPOSITORY = "repository"
MODEL = "model"
DTO = "dto"
CONFIG = "config"
EXCEPTION = "exception"
ENUMERATION = "enumeration"
UNKNOWN = "unknown"

LAYERS: Tuple[str, ...] = (
    CONTROLLER, SERVICE, REPOSITORY, MODEL, DTO, CONFIG, EXCEPTION, ENUMERATION, UNKNOWN,
)

# Checked in order; first hit wins.
_NAME_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (CONTROLLER, ("controller",)),
    (SERVICE, ("service", "implementation")),
    (REPOSITORY, ("repository", "repo")),
    (MODEL, ("model", "entity")),
    (DTO, ("dto",)),
    (CONFIG, ("config",)),
    (EXCEPTION, ("exception",)),
    (ENUMERATION, ("enumeration",)),
)


def classify(component_id: str, explicit_layer: Optional[str] = None) -> str:
    """Return the layer of a component.

    Parameters
    ----------
    component_id : str
        Component identifier (usually a fully-qualified class name).
    explicit_layer : Optional[str]
        Layer reported by the analyser. Returned verbatim when non-empty.

    Returns
    -------
    str
        ``explicit_layer`` if given, else the first layer whose keywords
        occur (case-insensitively) in ``component_id``, else ``"unknown"``.
    """
    if explicit_layer:
        return explicit_layer
    lowered = component_id.lower()
    for layer, needles in _NAME_RULES:
        if any(n in lowered for n in needles):
            return layer
    return UNKNOWN


def layer_sort_key(layer: str) -> Tuple[int, str]:
    """Order known layers canonically, then any custom ones alphabetically."""
    try:
        return (LAYERS.index(layer), layer)
    except ValueError:
        return (len(LAYERS), layer)

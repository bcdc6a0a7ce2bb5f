"""Exception types raised by the ArchLens core.

All of them derive from ``ValueError`` so callers that only care about
"bad input" can catch that; the GUI catches ``ArchLensError`` at each slot.
"""

from __future__ import annotations


class ArchLensError(ValueError):
    """Base class for every error raised by the core package."""


class AnalysisFormatError(ArchLensError):
    """An analysis document (components / architecture JSON) is malformed."""


class UnknownClusterError(ArchLensError):
    """A cluster id does not name any proposal."""

    def __init__(self, cluster_id: int):
        super().__init__(f"no proposal with id {cluster_id}")
        self.cluster_id = cluster_id


class UnknownComponentError(ArchLensError):
    """A component id is not part of the loaded inventory."""

    def __init__(self, component_id: str):
        super().__init__(f"unknown component {component_id!r}")
        self.component_id = component_id

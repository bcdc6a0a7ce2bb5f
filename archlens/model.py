"""Analysis documents: component inventory and clustering proposals.

The static analyser hands us two JSON documents:

* ``components.json``   -> ``{"components": [...], "edges": [{"from", "to"}, ...]}``
* ``architecture.json`` -> ``{"project_metadata": {...}, "summary": "...",
  "proposals": [...], "support_libraries": [...]}``

Both are parsed into frozen dataclasses. Components are never mutated;
proposals are replaced wholesale by :mod:`archlens.membership` when their
membership or editable fields change.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .errors import AnalysisFormatError

JsonSource = Union[str, Path, Mapping[str, Any]]


# --------------------------- Data structures ---------------------------

@dataclass(frozen=True)
class ComponentAttributes:
    """Descriptive passthrough payload shown only in the detail view.

    None of these fields influence layout, filtering or clustering.
    """
    tables_used: Tuple[str, ...] = ()
    sensitive_data: bool = False
    annotations: Tuple[str, ...] = ()
    ejb_type: Optional[str] = None
    is_interface: bool = False
    secrets_references: Tuple[str, ...] = ()
    external_dependencies: Tuple[str, ...] = ()
    extends: Optional[str] = None
    implements: Tuple[str, ...] = ()
    messaging_type: Optional[str] = None
    messaging_role: Optional[str] = None
    web_type: Optional[str] = None
    web_role: Optional[str] = None
    cbo: Optional[float] = None
    lcom: Optional[float] = None


@dataclass(frozen=True)
class Component:
    """A unit of analysed code and a graph node.

    Attributes
    ----------
    id : str
        Stable identity, typically a fully-qualified type name.
    layer : Optional[str]
        Explicit layer from the analyser, or None to infer from ``id``.
    loc : int
        Lines of code, the size proxy. Defaults to 1.
    attrs : ComponentAttributes
        Opaque detail-view payload.
    """
    id: str
    layer: Optional[str] = None
    loc: int = 1
    attrs: ComponentAttributes = field(default_factory=ComponentAttributes)


@dataclass(frozen=True)
class Edge:
    """Directed dependency ``source -> target`` (JSON keys ``from`` / ``to``)."""
    source: str
    target: str


@dataclass(frozen=True)
class ProposalMetrics:
    size: int = 0
    cohesion_avg: float = 0.0
    external_coupling: float = 0.0
    tables: Tuple[str, ...] = ()
    sensitive: bool = False


@dataclass(frozen=True)
class Proposal:
    """A candidate service boundary: a named, exclusive set of component ids."""
    id: int
    name: str
    viability: str = ""
    components: Tuple[str, ...] = ()
    metrics: ProposalMetrics = field(default_factory=ProposalMetrics)
    rationale: Tuple[str, ...] = ()
    recommended_actions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SupportLibrary:
    id: int
    name: str
    components: Tuple[str, ...] = ()
    clusters: Tuple[int, ...] = ()


@dataclass(frozen=True)
class PackageDependencyDetails:
    components_count: int = 0
    total_dependencies_out: int = 0
    depends_on_packages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ProjectMetadata:
    total_components: int = 0
    total_loc: int = 0
    shared_domain: str = ""
    components_with_secrets: int = 0
    external_dependencies: Dict[str, str] = field(default_factory=dict)
    package_dependencies: Dict[str, PackageDependencyDetails] = field(default_factory=dict)


@dataclass(frozen=True)
class ComponentsData:
    components: Tuple[Component, ...] = ()
    edges: Tuple[Edge, ...] = ()

    def by_id(self) -> Dict[str, Component]:
        return {c.id: c for c in self.components}


@dataclass(frozen=True)
class ArchitectureData:
    project_metadata: Optional[ProjectMetadata] = None
    summary: str = ""
    proposals: Tuple[Proposal, ...] = ()
    support_libraries: Tuple[SupportLibrary, ...] = ()


# --------------------------- Parsing helpers ---------------------------

def _read_json(source: JsonSource) -> Mapping[str, Any]:
    """Return the decoded top-level JSON object from a path or a mapping."""
    if isinstance(source, Mapping):
        return source
    path = Path(source)
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise AnalysisFormatError(f"{path.name}: invalid JSON ({e})") from e
    if not isinstance(data, Mapping):
        raise AnalysisFormatError(f"{path.name}: top-level value must be an object")
    return data


def _mapping(raw: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise AnalysisFormatError(f"{what} must be an object, got {raw!r}")
    return raw


def _int(value: Any, what: str, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise AnalysisFormatError(f"{what} must be an integer, got {value!r}") from e


def _float(value: Any, what: str, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise AnalysisFormatError(f"{what} must be a number, got {value!r}") from e


def _str_tuple(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Mapping) or not hasattr(value, "__iter__"):
        raise AnalysisFormatError(f"expected a list of strings, got {value!r}")
    return tuple(str(v) for v in value)


def _opt_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _opt_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_loc(raw: Any, cid: str) -> int:
    """Parse a ``loc`` value; absent / null / zero falls back to 1."""
    if raw is None:
        return 1
    try:
        loc = int(raw)
    except (TypeError, ValueError) as e:
        raise AnalysisFormatError(f"component {cid!r}: loc must be an integer, got {raw!r}") from e
    if loc < 0:
        raise AnalysisFormatError(f"component {cid!r}: loc must be non-negative, got {loc}")
    return loc or 1


def _parse_component(raw: Any) -> Component:
    raw = _mapping(raw, "component")
    cid = raw.get("id")
    if not isinstance(cid, str) or not cid:
        raise AnalysisFormatError(f"component without a string id: {raw!r}")
    attrs = ComponentAttributes(
        tables_used=_str_tuple(raw.get("tables_used")),
        sensitive_data=bool(raw.get("sensitive_data", False)),
        annotations=_str_tuple(raw.get("annotations")),
        ejb_type=_opt_str(raw.get("ejb_type")),
        is_interface=bool(raw.get("is_interface", raw.get("interface", False))),
        secrets_references=_str_tuple(raw.get("secrets_references")),
        external_dependencies=_str_tuple(raw.get("external_dependencies")),
        extends=_opt_str(raw.get("extends")),
        implements=_str_tuple(raw.get("implements")),
        messaging_type=_opt_str(raw.get("messaging_type")),
        messaging_role=_opt_str(raw.get("messaging_role")),
        web_type=_opt_str(raw.get("web_type")),
        web_role=_opt_str(raw.get("web_role")),
        cbo=_opt_float(raw.get("cbo")),
        lcom=_opt_float(raw.get("lcom")),
    )
    return Component(
        id=cid,
        layer=_opt_str(raw.get("layer")),
        loc=_parse_loc(raw.get("loc"), cid),
        attrs=attrs,
    )


def _parse_edge(raw: Any) -> Edge:
    raw = _mapping(raw, "edge")
    src, dst = raw.get("from"), raw.get("to")
    if not isinstance(src, str) or not isinstance(dst, str):
        raise AnalysisFormatError(f"edge needs string 'from' and 'to': {raw!r}")
    return Edge(src, dst)


def _parse_metrics(raw: Any, pid: int) -> ProposalMetrics:
    raw = _mapping(raw or {}, f"proposal {pid} metrics")
    return ProposalMetrics(
        size=_int(raw.get("size"), f"proposal {pid} metrics.size"),
        cohesion_avg=_float(raw.get("cohesion_avg"), f"proposal {pid} metrics.cohesion_avg"),
        external_coupling=_float(raw.get("external_coupling"), f"proposal {pid} metrics.external_coupling"),
        tables=_str_tuple(raw.get("tables")),
        sensitive=bool(raw.get("sensitive", False)),
    )


def _parse_proposal(raw: Any) -> Proposal:
    raw = _mapping(raw, "proposal")
    try:
        pid = int(raw["id"])
    except (KeyError, TypeError, ValueError) as e:
        raise AnalysisFormatError(f"proposal without an integer id: {raw!r}") from e
    return Proposal(
        id=pid,
        name=str(raw.get("name") or f"Cluster {pid}"),
        viability=str(raw.get("viability") or ""),
        components=_str_tuple(raw.get("components")),
        metrics=_parse_metrics(raw.get("metrics"), pid),
        rationale=_str_tuple(raw.get("rationale")),
        recommended_actions=_str_tuple(raw.get("recommended_actions")),
    )


def _parse_package(name: Any, raw: Any) -> PackageDependencyDetails:
    what = f"package_dependencies[{name!r}]"
    d = _mapping(raw, what)
    return PackageDependencyDetails(
        components_count=_int(d.get("components_count"), f"{what}.components_count"),
        total_dependencies_out=_int(d.get("total_dependencies_out"), f"{what}.total_dependencies_out"),
        depends_on_packages=_str_tuple(d.get("depends_on_packages")),
    )


def _parse_metadata(raw: Any) -> Optional[ProjectMetadata]:
    if not raw:
        return None
    raw = _mapping(raw, "project_metadata")
    packages = {
        str(name): _parse_package(name, d)
        for name, d in _mapping(raw.get("package_dependencies") or {}, "package_dependencies").items()
    }
    externals = _mapping(raw.get("external_dependencies") or {}, "external_dependencies")
    return ProjectMetadata(
        total_components=_int(raw.get("total_components"), "project_metadata.total_components"),
        total_loc=_int(raw.get("total_loc"), "project_metadata.total_loc"),
        shared_domain=str(raw.get("shared_domain") or ""),
        components_with_secrets=_int(raw.get("components_with_secrets"), "project_metadata.components_with_secrets"),
        external_dependencies={str(k): str(v) for k, v in externals.items()},
        package_dependencies=packages,
    )


def _parse_support_library(raw: Any, index: int) -> SupportLibrary:
    raw = _mapping(raw, "support library")
    lid = _int(raw.get("id"), "support library id", default=index)
    clusters = raw.get("clusters") or ()
    if isinstance(clusters, (str, Mapping)):
        raise AnalysisFormatError(f"support library {lid}: clusters must be a list, got {clusters!r}")
    return SupportLibrary(
        id=lid,
        name=str(raw.get("name") or ""),
        components=_str_tuple(raw.get("components")),
        clusters=tuple(_int(c, f"support library {lid} cluster id") for c in clusters),
    )


def _ensure_list(data: Mapping[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise AnalysisFormatError(f"'{key}' must be a list")
    return value


# --------------------------- Public API ---------------------------

def load_components(source: JsonSource) -> ComponentsData:
    """Parse the component inventory document.

    Parameters
    ----------
    source : str | Path | Mapping
        Path to ``components.json`` or an already decoded mapping.

    Returns
    -------
    ComponentsData
        Components in document order plus every edge (duplicates kept,
        dangling edges kept; the filter engine drops them later).
    """
    data = _read_json(source)
    components = tuple(_parse_component(c) for c in _ensure_list(data, "components"))
    edges = tuple(_parse_edge(e) for e in _ensure_list(data, "edges"))
    seen = set()
    for c in components:
        if c.id in seen:
            raise AnalysisFormatError(f"duplicate component id {c.id!r}")
        seen.add(c.id)
    return ComponentsData(components, edges)


def load_architecture(source: JsonSource) -> ArchitectureData:
    """Parse the clustering proposal document (``architecture.json``)."""
    data = _read_json(source)
    proposals = tuple(_parse_proposal(p) for p in _ensure_list(data, "proposals"))
    ids = [p.id for p in proposals]
    if len(ids) != len(set(ids)):
        raise AnalysisFormatError("proposal ids must be unique")
    libs = tuple(
        _parse_support_library(raw, i)
        for i, raw in enumerate(_ensure_list(data, "support_libraries"))
    )
    return ArchitectureData(
        project_metadata=_parse_metadata(data.get("project_metadata")),
        summary=str(data.get("summary") or ""),
        proposals=proposals,
        support_libraries=libs,
    )


def proposal_to_dict(p: Proposal) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "viability": p.viability,
        "components": list(p.components),
        "metrics": {
            "size": p.metrics.size,
            "cohesion_avg": p.metrics.cohesion_avg,
            "external_coupling": p.metrics.external_coupling,
            "tables": list(p.metrics.tables),
            "sensitive": p.metrics.sensitive,
        },
        "rationale": list(p.rationale),
        "recommended_actions": list(p.recommended_actions),
    }


def architecture_to_dict(arch: ArchitectureData, proposals: Optional[Iterable[Proposal]] = None) -> Dict[str, Any]:
    """Serialise architecture data back to the analyser's JSON shape.

    ``proposals`` overrides ``arch.proposals`` so callers can export the
    edited membership held by a :class:`~archlens.membership.ProposalStore`.
    """
    out: Dict[str, Any] = {}
    md = arch.project_metadata
    if md is not None:
        out["project_metadata"] = {
            "total_components": md.total_components,
            "total_loc": md.total_loc,
            "shared_domain": md.shared_domain,
            "components_with_secrets": md.components_with_secrets,
            "external_dependencies": dict(md.external_dependencies),
            "package_dependencies": {
                name: {
                    "components_count": d.components_count,
                    "total_dependencies_out": d.total_dependencies_out,
                    "depends_on_packages": list(d.depends_on_packages),
                }
                for name, d in md.package_dependencies.items()
            },
        }
    out["summary"] = arch.summary
    out["proposals"] = [proposal_to_dict(p) for p in (arch.proposals if proposals is None else proposals)]
    out["support_libraries"] = [
        {"id": s.id, "name": s.name, "components": list(s.components), "clusters": list(s.clusters)}
        for s in arch.support_libraries
    ]
    return out


def save_architecture(arch: ArchitectureData, path: Union[str, Path],
                      proposals: Optional[Iterable[Proposal]] = None) -> None:
    """Write the (possibly edited) architecture document as indented JSON."""
    with Path(path).open("w", encoding="utf-8") as fh:
        json.dump(architecture_to_dict(arch, proposals), fh, indent=2, ensure_ascii=False)

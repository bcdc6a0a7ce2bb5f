"""Read-only projections: colour legends, tooltips and the detail panel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .hulls import NEUTRAL_BORDER, cluster_color, layer_color
from .layers import classify, layer_sort_key
from .membership import UNCLUSTERED_NAME, ProposalStore
from .model import Component

NOT_AVAILABLE = "N/A"
NONE_LISTED = "None"


@dataclass(frozen=True)
class LegendEntry:
    """One legend swatch. ``kind`` is "fill" (layer) or "border" (cluster)."""
    key: str
    label: str
    color: str
    kind: str


def layer_legend(layers: Iterable[str]) -> List[LegendEntry]:
    return [LegendEntry(f"layer-{l}", l, layer_color(l), "fill")
            for l in sorted(set(layers), key=layer_sort_key)]


def cluster_legend(store: ProposalStore) -> List[LegendEntry]:
    """Cluster border colours in proposal order, then the unclustered swatch."""
    entries = [LegendEntry(f"cluster-{p.id}", p.name, cluster_color(p.id), "border")
               for p in store.proposals]
    entries.append(LegendEntry("cluster-none", UNCLUSTERED_NAME, NEUTRAL_BORDER, "border"))
    return entries


def tooltip_text(component_id: str, cluster_name: str, layer: str, loc: int) -> str:
    return f"ID: {component_id}\nCluster: {cluster_name}\nLayer: {layer}\nLOC: {loc}"


# --------------------------- Detail view ---------------------------

@dataclass(frozen=True)
class DetailSection:
    title: str
    rows: Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class ComponentDetail:
    """Everything the detail dialog shows for one component."""
    component_id: str
    layer: str
    cluster_id: Optional[int]
    cluster_name: str
    header: Tuple[Tuple[str, str], ...]
    sections: Tuple[DetailSection, ...]


def _fmt(value) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _fmt_list(items: Sequence[str]) -> str:
    return ", ".join(items) if items else NONE_LISTED


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def component_detail(component: Component, store: ProposalStore) -> ComponentDetail:
    """Project a component's full record plus its *current* cluster.

    The cluster is read from ``store`` at call time, so the panel always
    reflects the latest reassignment.
    """
    a = component.attrs
    layer = classify(component.id, component.layer)
    cid = store.cluster_of(component.id)
    cname = store.cluster_name(component.id)
    header = (
        ("Layer", layer),
        ("Current cluster", cname),
        ("Lines of code", _fmt(component.loc)),
        ("Interface", _yes_no(a.is_interface)),
        ("EJB type", _fmt(a.ejb_type)),
        ("Sensitive data", _yes_no(a.sensitive_data)),
    )
    sections = (
        DetailSection("Code metrics", (
            ("CBO (coupling between objects)", _fmt(a.cbo)),
            ("LCOM (lack of cohesion in methods)", _fmt(a.lcom)),
            ("Annotations", _fmt_list(a.annotations)),
        )),
        DetailSection("Hierarchy", (
            ("Extends", a.extends or NONE_LISTED),
            ("Implements", _fmt_list(a.implements)),
        )),
        DetailSection("Dependencies", (
            ("Database tables", _fmt_list(a.tables_used)),
            ("External dependencies", _fmt_list(a.external_dependencies)),
            ("Secrets references", _fmt_list(a.secrets_references)),
        )),
        DetailSection("Integrations", (
            ("Messaging type", _fmt(a.messaging_type)),
            ("Messaging role", _fmt(a.messaging_role)),
            ("Web type", _fmt(a.web_type)),
            ("Web role", _fmt(a.web_role)),
        )),
    )
    return ComponentDetail(component.id, layer, cid, cname, header, sections)


def format_detail(detail: ComponentDetail) -> str:
    """Plain-text rendering of a detail projection (clipboard copy)."""
    lines = [detail.component_id, ""]
    lines += [f"{k}: {v}" for k, v in detail.header]
    for section in detail.sections:
        lines += ["", section.title]
        lines += [f"  {k}: {v}" for k, v in section.rows]
    return "\n".join(lines)

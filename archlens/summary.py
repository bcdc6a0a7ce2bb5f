"""Project-level summary figures and the package dependency tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from .model import ArchitectureData, ComponentsData, PackageDependencyDetails, Proposal


@dataclass(frozen=True)
class ProjectSummary:
    total_components: int
    total_loc: int
    shared_domain: str
    components_with_secrets: int
    db_tables: int
    sensitive_proposals: int
    proposals: int
    support_libraries: int


def summarize(components: ComponentsData, arch: ArchitectureData,
              proposals: Optional[Iterable[Proposal]] = None) -> ProjectSummary:
    """Headline numbers for the summary panel.

    Metadata reported by the analyser takes precedence; when it is missing
    the figures are derived from the inventory itself.
    """
    props = list(arch.proposals if proposals is None else proposals)
    md = arch.project_metadata
    tables = {t for p in props for t in p.metrics.tables}
    if md is not None:
        total_components = md.total_components or len(components.components)
        total_loc = md.total_loc or sum(c.loc for c in components.components)
        secrets = md.components_with_secrets
        domain = md.shared_domain
    else:
        total_components = len(components.components)
        total_loc = sum(c.loc for c in components.components)
        secrets = sum(1 for c in components.components if c.attrs.secrets_references)
        domain = ""
    return ProjectSummary(
        total_components=total_components,
        total_loc=total_loc,
        shared_domain=domain or "N/A",
        components_with_secrets=secrets,
        db_tables=len(tables),
        sensitive_proposals=sum(1 for p in props if p.metrics.sensitive),
        proposals=len(props),
        support_libraries=len(arch.support_libraries),
    )


@dataclass
class PackageNode:
    """Node of the dotted-package prefix tree."""
    name: str
    full_name: str
    details: Optional[PackageDependencyDetails] = None
    children: Dict[str, "PackageNode"] = field(default_factory=dict)

    def walk(self, depth: int = 0):
        """Yield ``(depth, node)`` in pre-order, children sorted by name."""
        yield depth, self
        for key in sorted(self.children):
            yield from self.children[key].walk(depth + 1)


def build_package_tree(packages: Mapping[str, PackageDependencyDetails]) -> PackageNode:
    """Fold ``{"com.acme.billing": details, ...}`` into a prefix tree.

    Parameters
    ----------
    packages : Mapping[str, PackageDependencyDetails]
        Package name -> dependency details, as found in project metadata.

    Returns
    -------
    PackageNode
        Synthetic root named ``"root"``; intermediate packages without
        their own entry have ``details=None``.
    """
    root = PackageNode("root", "root")
    for pkg, details in packages.items():
        parts = [p for p in pkg.split(".") if p]
        node = root
        for i, part in enumerate(parts):
            child = node.children.get(part)
            if child is None:
                child = PackageNode(part, ".".join(parts[: i + 1]))
                node.children[part] = child
            node = child
        if node is not root:
            node.details = details
    return root


def proposal_lines(p: Proposal) -> List[str]:
    """Plain-text summary block for a proposal card."""
    m = p.metrics
    lines = [
        f"{p.name} (ID: {p.id})" + (f"  [{p.viability}]" if p.viability else ""),
        f"  components: {len(p.components)}  size: {m.size}  "
        f"cohesion: {m.cohesion_avg:.2f}  external coupling: {m.external_coupling:.2f}",
        f"  tables: {', '.join(m.tables) if m.tables else 'N/A'}"
        + ("  (sensitive)" if m.sensitive else ""),
    ]
    if p.rationale:
        lines.append("  rationale:")
        lines += [f"    - {r}" for r in p.rationale]
    if p.recommended_actions:
        lines.append("  recommended actions:")
        lines += [f"    - {a}" for a in p.recommended_actions]
    return lines

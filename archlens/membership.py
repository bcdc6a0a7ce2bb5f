"""Cluster membership: who belongs to which proposal.

The proposal list is owned by the wider application (it is what gets
exported and persisted). :class:`ProposalStore` wraps it, keeps a
component -> proposal index in sync, and is the only place membership
is mutated.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import UnknownClusterError
from .model import Component, Proposal

UNCLUSTERED_NAME = "unclustered"

ComponentUpdateHook = Callable[[Component, int], None]
ProposalUpdateHook = Callable[[Proposal], None]


def _noop_log(msg: str) -> None:
    pass


class ProposalStore:
    """Exclusive component-to-proposal membership with a single mutation path.

    Parameters
    ----------
    proposals : Iterable[Proposal]
        Proposals as loaded. A component listed by several proposals is
        kept only in the first one (document order).
    on_component_update : Optional[ComponentUpdateHook]
        Called as ``hook(component, new_cluster_id)`` after a reassign.
    on_proposal_update : Optional[ProposalUpdateHook]
        Called with the new proposal after :meth:`update_proposal`.
    log : Callable[[str], None]
        Sink for ``[tag] message`` lines.
    """

    def __init__(
        self,
        proposals: Iterable[Proposal] = (),
        on_component_update: Optional[ComponentUpdateHook] = None,
        on_proposal_update: Optional[ProposalUpdateHook] = None,
        log: Callable[[str], None] = _noop_log,
    ):
        self.on_component_update = on_component_update
        self.on_proposal_update = on_proposal_update
        self._log = log
        self._proposals: Tuple[Proposal, ...] = ()
        self._owner: Dict[str, int] = {}
        self.load(proposals)

    # -------- Loading --------
    def load(self, proposals: Iterable[Proposal]) -> None:
        """Replace all proposals, normalising duplicate membership."""
        owner: Dict[str, int] = {}
        cleaned: List[Proposal] = []
        dropped = 0
        for p in proposals:
            members: List[str] = []
            for cid in p.components:
                if cid in owner:
                    dropped += 1
                    continue
                owner[cid] = p.id
                members.append(cid)
            cleaned.append(p if len(members) == len(p.components) else replace(p, components=tuple(members)))
        if dropped:
            self._log(f"[proposal] dropped {dropped} duplicate membership(s); first proposal wins")
        self._proposals = tuple(cleaned)
        self._owner = owner

    # -------- Queries --------
    @property
    def proposals(self) -> Tuple[Proposal, ...]:
        return self._proposals

    @property
    def cluster_ids(self) -> List[int]:
        return [p.id for p in self._proposals]

    def get(self, cluster_id: int) -> Proposal:
        for p in self._proposals:
            if p.id == cluster_id:
                return p
        raise UnknownClusterError(cluster_id)

    def has_cluster(self, cluster_id: int) -> bool:
        return any(p.id == cluster_id for p in self._proposals)

    def cluster_of(self, component_id: str) -> Optional[int]:
        """Id of the proposal listing ``component_id``, or None if unclustered."""
        return self._owner.get(component_id)

    def cluster_name(self, component_id: str) -> str:
        cid = self._owner.get(component_id)
        if cid is None:
            return UNCLUSTERED_NAME
        return self.get(cid).name

    def members(self, cluster_id: int) -> Tuple[str, ...]:
        return self.get(cluster_id).components

    def names(self) -> Dict[int, str]:
        return {p.id: p.name for p in self._proposals}

    def total_members(self) -> int:
        return sum(len(p.components) for p in self._proposals)

    # -------- Mutations --------
    def reassign(self, component: Component, target_id: int) -> Tuple[Proposal, ...]:
        """Move ``component`` into proposal ``target_id``.

        The new proposal tuple is fully built before it replaces the old
        one, so no observer ever sees the component in zero or two
        proposals. Moving to the current cluster is a no-op.

        Raises
        ------
        UnknownClusterError
            ``target_id`` names no proposal; nothing is changed.
        """
        if not self.has_cluster(target_id):
            raise UnknownClusterError(target_id)
        cid = component.id
        previous = self._owner.get(cid)
        if previous == target_id:
            self._log(f"[reassign] {cid} already in cluster {target_id}; nothing to do")
            return self._proposals

        updated: List[Proposal] = []
        for p in self._proposals:
            if p.id == target_id:
                updated.append(replace(p, components=p.components + (cid,)))
            elif p.id == previous:
                updated.append(replace(p, components=tuple(m for m in p.components if m != cid)))
            else:
                updated.append(p)

        self._proposals = tuple(updated)
        self._owner[cid] = target_id
        src = "unclustered" if previous is None else f"cluster {previous}"
        self._log(f"[reassign] {cid}: {src} -> cluster {target_id}")
        if self.on_component_update is not None:
            self.on_component_update(component, target_id)
        return self._proposals

    def update_proposal(self, proposal: Proposal) -> Tuple[Proposal, ...]:
        """Replace the editable fields (name, rationale, actions) of a proposal.

        Membership is not editable here: the stored member list is kept
        regardless of what ``proposal.components`` says.
        """
        current = self.get(proposal.id)
        merged = replace(
            current,
            name=proposal.name,
            rationale=tuple(proposal.rationale),
            recommended_actions=tuple(proposal.recommended_actions),
        )
        self._proposals = tuple(merged if p.id == proposal.id else p for p in self._proposals)
        self._log(f"[proposal] updated '{merged.name}' (id={merged.id})")
        if self.on_proposal_update is not None:
            self.on_proposal_update(merged)
        return self._proposals


def split_lines(text: str) -> Sequence[str]:
    """Split a multi-line editor value into non-empty, stripped lines."""
    return [ln.strip() for ln in text.splitlines() if ln.strip()]

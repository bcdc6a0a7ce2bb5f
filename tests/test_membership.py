import pytest

from archlens.errors import UnknownClusterError
from archlens.membership import UNCLUSTERED_NAME, ProposalStore, split_lines
from archlens.model import Component, Proposal


def _store(**hooks):
    return ProposalStore(
        [Proposal(1, "Billing", components=("A", "B")), Proposal(2, "Ledger")],
        **hooks,
    )


def test_reassign_moves_member_exclusively():
    calls = []
    store = _store(on_component_update=lambda c, cid: calls.append((c.id, cid)))
    proposals = store.reassign(Component("B"), 2)
    assert proposals[0].components == ("A",)
    assert proposals[1].components == ("B",)
    assert store.cluster_of("B") == 2
    assert store.total_members() == 2
    assert calls == [("B", 2)]


def test_reassign_unclustered_component():
    store = _store()
    store.reassign(Component("C"), 1)
    assert store.members(1) == ("A", "B", "C")
    assert store.cluster_name("C") == "Billing"


def test_reassign_to_unknown_cluster_changes_nothing():
    calls = []
    store = _store(on_component_update=lambda c, cid: calls.append(cid))
    before = store.proposals
    with pytest.raises(UnknownClusterError) as exc:
        store.reassign(Component("A"), 99)
    assert exc.value.cluster_id == 99
    assert store.proposals == before
    assert calls == []


def test_reassign_to_current_cluster_is_noop():
    calls = []
    logs = []
    store = _store(on_component_update=lambda c, cid: calls.append(cid), log=logs.append)
    before = store.proposals
    assert store.reassign(Component("A"), 1) is before
    assert calls == []
    assert any("nothing to do" in line for line in logs)


def test_duplicate_membership_first_proposal_wins():
    logs = []
    store = ProposalStore(
        [Proposal(1, "One", components=("A", "B")), Proposal(2, "Two", components=("B", "C"))],
        log=logs.append,
    )
    assert store.members(2) == ("C",)
    assert store.cluster_of("B") == 1
    assert logs and logs[0].startswith("[proposal] dropped 1")


def test_unclustered_name():
    store = _store()
    assert store.cluster_of("nobody") is None
    assert store.cluster_name("nobody") == UNCLUSTERED_NAME


def test_update_proposal_keeps_membership():
    seen = []
    store = _store(on_proposal_update=seen.append)
    edited = Proposal(1, "Invoicing", components=(), rationale=("cohesive",),
                      recommended_actions=("extract", "split db"))
    store.update_proposal(edited)
    p = store.get(1)
    assert p.name == "Invoicing"
    assert p.components == ("A", "B")
    assert p.recommended_actions == ("extract", "split db")
    assert seen == [p]


def test_update_unknown_proposal_raises():
    with pytest.raises(UnknownClusterError):
        _store().update_proposal(Proposal(7, "Nope"))


def test_split_lines():
    assert split_lines("  one\n\n two \n") == ["one", "two"]

from types import SimpleNamespace

import pytest

from models import PaperStatus, InvitationStatus
from services import lifecycle
from services.errors import Conflict, ValidationError


def paper(status=PaperStatus.submitted, reviewer_ids=()):
    return SimpleNamespace(status=status, reviewer_ids=list(reviewer_ids))


def test_assign_moves_paper_under_review():
    reviewer_ids, status = lifecycle.assign_reviewer(paper(), "r1")
    assert reviewer_ids == ["r1"]
    assert status == PaperStatus.under_review


def test_assign_same_reviewer_twice_conflicts():
    with pytest.raises(Conflict, match="already assigned"):
        lifecycle.assign_reviewer(paper(PaperStatus.under_review, ["r1"]), "r1")


def test_assign_does_not_mutate_input():
    p = paper(reviewer_ids=["r1"])
    lifecycle.assign_reviewer(p, "r2")
    assert p.reviewer_ids == ["r1"]


def test_unassign_last_reviewer_keeps_status():
    p = paper(PaperStatus.under_review, ["r1"])
    assert lifecycle.unassign_reviewer(p, "r1") == []
    assert lifecycle.unassign_reviewer(p, "nobody") == ["r1"]


@pytest.mark.parametrize("decision", [
    PaperStatus.changes_requested, PaperStatus.accepted, PaperStatus.rejected,
])
def test_decide_from_under_review(decision):
    assert lifecycle.decide(paper(PaperStatus.under_review), decision) == decision


def test_decide_after_changes_requested():
    assert lifecycle.decide(paper(PaperStatus.changes_requested), PaperStatus.accepted) == PaperStatus.accepted


def test_decide_before_review_conflicts():
    with pytest.raises(Conflict, match="under review"):
        lifecycle.decide(paper(PaperStatus.submitted), PaperStatus.accepted)


@pytest.mark.parametrize("terminal", [PaperStatus.accepted, PaperStatus.rejected])
def test_terminal_papers_cannot_be_decided_again(terminal):
    with pytest.raises(Conflict, match="already been"):
        lifecycle.decide(paper(terminal), PaperStatus.changes_requested)


def test_decide_rejects_non_decision_status():
    with pytest.raises(ValidationError):
        lifecycle.decide(paper(PaperStatus.under_review), PaperStatus.submitted)


def test_add_member_skips_owner():
    org = SimpleNamespace(owner_id="o1", member_ids=["m1"])
    assert lifecycle.add_member(org, "o1") == ["m1"]
    assert lifecycle.add_member(org, "m2") == ["m1", "m2"]
    assert lifecycle.add_member(org, "m1") == ["m1"]


def test_owner_cannot_be_removed():
    org = SimpleNamespace(owner_id="o1", member_ids=["m1"])
    with pytest.raises(Conflict):
        lifecycle.remove_member(org, "o1")
    assert lifecycle.remove_member(org, "m1") == []


def test_ensure_invitable():
    org = SimpleNamespace(owner_id="o1", member_ids=["m1"])
    with pytest.raises(Conflict, match="already a member"):
        lifecycle.ensure_invitable(org, "o1")
    with pytest.raises(Conflict, match="already a member"):
        lifecycle.ensure_invitable(org, "m1")
    pending = [SimpleNamespace(status=InvitationStatus.pending)]
    with pytest.raises(Conflict, match="pending invitation"):
        lifecycle.ensure_invitable(org, "u1", pending)
    lifecycle.ensure_invitable(org, "u1", [SimpleNamespace(status=InvitationStatus.declined)])


def test_invitation_response_only_once():
    invitation = SimpleNamespace(status=InvitationStatus.pending)
    assert lifecycle.respond_to_invitation(invitation, InvitationStatus.accepted) == InvitationStatus.accepted

    invitation.status = InvitationStatus.accepted
    with pytest.raises(Conflict, match="already been accepted"):
        lifecycle.respond_to_invitation(invitation, InvitationStatus.declined)


def test_invitation_response_must_be_accept_or_decline():
    invitation = SimpleNamespace(status=InvitationStatus.pending)
    with pytest.raises(ValidationError):
        lifecycle.respond_to_invitation(invitation, InvitationStatus.pending)

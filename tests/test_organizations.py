import logging

import pytest
from sqlalchemy.exc import OperationalError

from models import InvitationStatus, UserRole
from services import organizations, conferences, papers, reviews
from extensions import db
from services.errors import Conflict, DependencyFailure, NotFound, Unauthorized, ValidationError


@pytest.fixture
def acm(store, organizer):
    return organizations.create_organization(store, organizer, {"name": "ACM"})


def invite_and_accept(store, owner, org, user):
    invitation = organizations.create_invitation(store, owner, org.id, {"invited_user_id": user.id})
    return organizations.respond_to_invitation(store, user, invitation.id, {"status": "ACCEPTED"})


def test_create_organization_owner_not_in_members(store, organizer, acm):
    assert acm.owner_id == organizer.id
    assert acm.member_ids == []


def test_non_organizer_cannot_create_organization(store, author):
    with pytest.raises(Unauthorized, match="Only organizers"):
        organizations.create_organization(store, author, {"name": "Authors United"})


def test_update_rejects_member_ids(store, organizer, reviewer, acm):
    with pytest.raises(ValidationError, match="member_ids"):
        organizations.update_organization(store, organizer, acm.id, {"member_ids": [reviewer.id]})
    assert organizations.get_organization(store, acm.id).member_ids == []


def test_only_owner_updates(store, make_user, acm):
    other = make_user(UserRole.organizer)
    with pytest.raises(Unauthorized):
        organizations.update_organization(store, other, acm.id, {"name": "Hijacked"})
    updated = organizations.update_organization(store, store.find_by_id("users", acm.owner_id), acm.id,
                                                {"name": "ACM SIGOPS"})
    assert updated.name == "ACM SIGOPS"


def test_accept_invitation_adds_member(store, organizer, reviewer, acm):
    invitation = invite_and_accept(store, organizer, acm, reviewer)

    assert invitation.status == InvitationStatus.accepted
    assert organizations.get_organization(store, acm.id).member_ids == [reviewer.id]
    assert [u.id for u in organizations.list_members(store, acm.id)] == [organizer.id, reviewer.id]
    assert [o.id for o in organizations.list_organizations_for_user(store, reviewer.id)] == [acm.id]


def test_accepting_twice_fails(store, organizer, reviewer, acm):
    invitation = invite_and_accept(store, organizer, acm, reviewer)
    with pytest.raises(Conflict, match="already been accepted"):
        organizations.respond_to_invitation(store, reviewer, invitation.id, {"status": "ACCEPTED"})
    assert organizations.get_organization(store, acm.id).member_ids == [reviewer.id]


def test_only_invited_user_can_respond(store, organizer, reviewer, author, acm):
    invitation = organizations.create_invitation(store, organizer, acm.id, {"invited_user_id": reviewer.id})
    with pytest.raises(Unauthorized):
        organizations.respond_to_invitation(store, author, invitation.id, {"status": "ACCEPTED"})
    assert organizations.get_invitation(store, invitation.id).status == InvitationStatus.pending


def test_invite_existing_member_or_owner_conflicts(store, organizer, reviewer, acm):
    invite_and_accept(store, organizer, acm, reviewer)
    with pytest.raises(Conflict):
        organizations.create_invitation(store, organizer, acm.id, {"invited_user_id": reviewer.id})
    with pytest.raises(Conflict):
        organizations.create_invitation(store, organizer, acm.id, {"invited_user_id": organizer.id})


def test_single_pending_invitation(store, organizer, reviewer, acm):
    organizations.create_invitation(store, organizer, acm.id, {"invited_user_id": reviewer.id})
    with pytest.raises(Conflict, match="pending invitation"):
        organizations.create_invitation(store, organizer, acm.id, {"invited_user_id": reviewer.id})


def test_decline_then_reinvite(store, organizer, reviewer, acm):
    first = organizations.create_invitation(store, organizer, acm.id, {"invited_user_id": reviewer.id})
    declined = organizations.respond_to_invitation(store, reviewer, first.id, {"status": "declined"})
    assert declined.status == InvitationStatus.declined
    assert organizations.get_organization(store, acm.id).member_ids == []

    second = organizations.create_invitation(store, organizer, acm.id, {"invited_user_id": reviewer.id})
    assert second.id != first.id
    assert organizations.get_invitation(store, first.id).status == InvitationStatus.declined

    pending = organizations.list_invitations_for_user(store, reviewer.id, InvitationStatus.pending)
    assert [i.id for i in pending] == [second.id]


def test_invite_unknown_user(store, organizer, acm):
    with pytest.raises(NotFound, match="User not found"):
        organizations.create_invitation(store, organizer, acm.id, {"invited_user_id": "missing"})


def test_invite_with_numeric_id(store, organizer, make_user, acm):
    numeric = make_user(UserRole.reviewer, id=7)
    assert numeric.id == "7"

    invitation = organizations.create_invitation(store, organizer, acm.id, {"invited_user_id": 7})
    assert invitation.invited_user_id == "7"
    organizations.respond_to_invitation(store, numeric, invitation.id, {"status": "ACCEPTED"})
    assert organizations.get_organization(store, acm.id).member_ids == ["7"]


def test_remove_member(store, organizer, reviewer, make_user, acm):
    other = make_user(UserRole.reviewer)
    invite_and_accept(store, organizer, acm, reviewer)
    invite_and_accept(store, organizer, acm, other)

    with pytest.raises(Unauthorized):
        organizations.remove_member(store, reviewer, acm.id, {"user_id": other.id})
    with pytest.raises(Conflict):
        organizations.remove_member(store, organizer, acm.id, {"user_id": organizer.id})

    organizations.remove_member(store, reviewer, acm.id, {"user_id": reviewer.id})
    org = organizations.remove_member(store, organizer, acm.id, {"user_id": other.id})
    assert org.member_ids == []


def test_delete_organization_cascades(store, organizer, author, reviewer, acm):
    invite_and_accept(store, organizer, acm, reviewer)
    conf = conferences.create_conference(store, organizer, {
        "title": "SysConf", "description": "Systems", "organization_id": acm.id,
        "start_date": "2026-03-01", "end_date": "2026-03-03", "type": "OFFLINE",
    })
    paper = papers.submit_paper(store, author, {
        "title": "Fast Paxos", "abstract": "Consensus", "file_url": "https://files.example.org/p.pdf",
        "conference_id": conf.id,
    })
    papers.assign_reviewer(store, organizer, paper.id, {"reviewer_id": reviewer.id})
    review = reviews.submit_review(store, reviewer, paper.id, {"rating": 8})
    org_id, conf_id, paper_id, review_id = acm.id, conf.id, paper.id, review.id

    organizations.delete_organization(store, organizer, org_id)

    assert store.find_by_id("organizations", org_id) is None
    assert store.find_by_id("conferences", conf_id) is None
    assert store.find_by_id("papers", paper_id) is None
    assert store.find_by_id("reviews", review_id) is None
    assert store.find("invitations", org_id=org_id) == []


def test_delete_organization_owner_only(store, organizer, reviewer, acm):
    invite_and_accept(store, organizer, acm, reviewer)
    with pytest.raises(Unauthorized):
        organizations.delete_organization(store, reviewer, acm.id)
    assert organizations.get_organization(store, acm.id) is not None


def test_accept_store_failure_leaves_invitation_pending(store, organizer, reviewer, acm, monkeypatch, caplog):
    invitation = organizations.create_invitation(store, organizer, acm.id, {"invited_user_id": reviewer.id})
    invitation_id, org_id = invitation.id, acm.id

    def fail_commit():
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(db.session(), "commit", fail_commit)
    with caplog.at_level(logging.WARNING, logger="services.organizations"):
        with pytest.raises(DependencyFailure):
            organizations.respond_to_invitation(store, reviewer, invitation_id, {"status": "ACCEPTED"})
    monkeypatch.undo()

    assert "Reconciliation candidate" in caplog.text
    assert organizations.get_invitation(store, invitation_id).status == InvitationStatus.pending
    assert organizations.get_organization(store, org_id).member_ids == []

    # Accepting again once the store is back completes the join.
    organizations.respond_to_invitation(store, reviewer, invitation_id, {"status": "ACCEPTED"})
    assert organizations.get_organization(store, org_id).member_ids == [reviewer.id]


def test_only_owner_lists_organization_invitations(store, organizer, reviewer, acm):
    invite_and_accept(store, organizer, acm, reviewer)
    with pytest.raises(Unauthorized, match="view its invitations"):
        organizations.list_invitations_for_organization(store, reviewer, acm.id)
    assert len(organizations.list_invitations_for_organization(store, organizer, acm.id)) == 1

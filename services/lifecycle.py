"""
Lifecycle rules for papers, invitations and the id sets hanging off
organizations, papers and conferences.

Functions here never write. They take the current state and return the next
one (new lists, new statuses), or raise ``Conflict`` / ``ValidationError`` when
the transition is not legal. The service layer persists the result.
"""
from enum import Enum

from models import PaperStatus, InvitationStatus
from .errors import Conflict, ValidationError


class PaperEvent(Enum):
    reviewer_assigned = "reviewer_assigned"
    decided = "decided"


DECISION_STATUSES = frozenset({
    PaperStatus.changes_requested,
    PaperStatus.accepted,
    PaperStatus.rejected,
})

# event -> {current status: allowed next statuses}
PAPER_TRANSITIONS = {
    PaperEvent.reviewer_assigned: {
        status: frozenset({PaperStatus.under_review}) for status in PaperStatus
    },
    PaperEvent.decided: {
        PaperStatus.under_review: DECISION_STATUSES,
        PaperStatus.changes_requested: DECISION_STATUSES,
    },
}

INVITATION_TRANSITIONS = {
    InvitationStatus.pending: frozenset({InvitationStatus.accepted, InvitationStatus.declined}),
    InvitationStatus.accepted: frozenset(),
    InvitationStatus.declined: frozenset(),
}


def next_paper_status(current, event, target):
    allowed = PAPER_TRANSITIONS[event].get(current, frozenset())
    if target in allowed:
        return target
    if event is PaperEvent.decided:
        if current == PaperStatus.submitted:
            raise Conflict("A decision can only be made once the paper is under review.")
        if current in (PaperStatus.accepted, PaperStatus.rejected):
            raise Conflict(f"Paper has already been {current.value.lower()}.")
        raise ValidationError(f"status: {target.value} is not a valid decision.")
    raise Conflict(f"Paper cannot move from {current.value} to {target.value}.")


# ---------- ID SETS ----------

def contains_id(ids, user_id):
    return user_id in (ids or [])


def add_id(ids, user_id):
    """Set-add: returns a new list, unchanged (but copied) if already present."""
    ids = list(ids or [])
    if user_id not in ids:
        ids.append(user_id)
    return ids


def remove_id(ids, user_id):
    """Set-remove: removing an absent id is a no-op."""
    return [existing for existing in (ids or []) if existing != user_id]


# ---------- ORGANIZATION MEMBERSHIP ----------

def add_member(organization, user_id):
    """New member list for ``organization``; the owner is implicit and never added."""
    if user_id == organization.owner_id:
        return list(organization.member_ids or [])
    return add_id(organization.member_ids, user_id)


def remove_member(organization, user_id):
    if user_id == organization.owner_id:
        raise Conflict("The organization owner cannot be removed from the organization.")
    return remove_id(organization.member_ids, user_id)


def ensure_invitable(organization, user_id, pending_invitations=()):
    if user_id == organization.owner_id or contains_id(organization.member_ids, user_id):
        raise Conflict("User is already a member of this organization.")
    if any(invite.status == InvitationStatus.pending for invite in pending_invitations):
        raise Conflict("User already has a pending invitation to this organization.")


# ---------- INVITATIONS ----------

def respond_to_invitation(invitation, response):
    """Next status for ``invitation``. Only PENDING invitations accept a response."""
    if response not in (InvitationStatus.accepted, InvitationStatus.declined):
        raise ValidationError("status: response must be ACCEPTED or DECLINED.")
    if response not in INVITATION_TRANSITIONS[invitation.status]:
        raise Conflict(f"Invitation has already been {invitation.status.value.lower()}.")
    return response


# ---------- REVIEWER ASSIGNMENT ----------

def assign_reviewer(paper, reviewer_id):
    """Returns ``(reviewer_ids, status)`` after assigning ``reviewer_id`` to ``paper``."""
    if contains_id(paper.reviewer_ids, reviewer_id):
        raise Conflict("Reviewer already assigned to this paper")
    status = next_paper_status(paper.status, PaperEvent.reviewer_assigned, PaperStatus.under_review)
    return add_id(paper.reviewer_ids, reviewer_id), status


def unassign_reviewer(paper, reviewer_id):
    # Status is left as is, even when the last reviewer goes.
    return remove_id(paper.reviewer_ids, reviewer_id)


def decide(paper, decision):
    return next_paper_status(paper.status, PaperEvent.decided, decision)

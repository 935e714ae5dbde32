"""
Authorization policy
====================

Pure decision functions: given the acting user, an action, the target entity
and whatever related entities the rule needs (``context``), decide whether the
action is allowed. Nothing here touches the store; callers load the entities
first and pass them in.

Denials carry the reason shown to the user, e.g.
``"Reviewer is not a member of the conference organization"``.
"""
import logging
from dataclasses import dataclass
from enum import Enum

from models import UserRole
from .errors import Unauthorized

logger = logging.getLogger(__name__)


class Action(Enum):
    create_organization = "create_organization"
    update_organization = "update_organization"
    delete_organization = "delete_organization"
    create_invitation = "create_invitation"
    list_invitations = "list_invitations"
    respond_invitation = "respond_invitation"
    remove_member = "remove_member"
    create_conference = "create_conference"
    update_conference = "update_conference"
    delete_conference = "delete_conference"
    manage_attendees = "manage_attendees"
    submit_paper = "submit_paper"
    assign_reviewer = "assign_reviewer"
    remove_reviewer = "remove_reviewer"
    decide_paper = "decide_paper"
    create_review = "create_review"
    update_review = "update_review"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = None

    def __bool__(self):
        return self.allowed


ALLOW = Decision(True)


def deny(reason):
    return Decision(False, reason)


_RULES = {}


def rule(*actions):
    def register(fn):
        for action in actions:
            _RULES[action] = fn
        return fn
    return register


def authorize(actor, action, target=None, context=None):
    """Return the ``Decision`` for ``actor`` performing ``action`` on ``target``."""
    if actor is None:
        return deny("You must be logged in to perform this action.")
    try:
        check = _RULES[action]
    except KeyError:
        raise ValueError(f"No policy rule for {action}") from None
    return check(actor, target, context or {})


def require(actor, action, target=None, context=None):
    """Like ``authorize`` but raises ``Unauthorized`` with the denial reason."""
    decision = authorize(actor, action, target, context)
    if not decision.allowed:
        logger.info("Denied %s to %s: %s", action.value, getattr(actor, "id", None), decision.reason)
        raise Unauthorized(decision.reason)
    return decision


def is_org_member(organization, user_id):
    """Owner counts as an (implicit) member."""
    return user_id == organization.owner_id or user_id in (organization.member_ids or [])


def organizes(actor, organization):
    """True when ``actor`` is an organizer who owns or belongs to ``organization``."""
    if actor.role != UserRole.organizer or organization is None:
        return False
    return is_org_member(organization, actor.id)


# ---------- ORGANIZATIONS ----------

@rule(Action.create_organization)
def _create_organization(actor, target, context):
    if actor.role != UserRole.organizer:
        return deny("Only organizers can create organizations.")
    return ALLOW


@rule(Action.update_organization, Action.delete_organization)
def _manage_organization(actor, organization, context):
    if actor.id != organization.owner_id:
        return deny("Only the organization owner can modify this organization.")
    return ALLOW


@rule(Action.create_invitation)
def _create_invitation(actor, organization, context):
    if actor.id != organization.owner_id:
        return deny("Only the organization owner can invite members.")
    return ALLOW


@rule(Action.list_invitations)
def _list_invitations(actor, organization, context):
    if actor.id != organization.owner_id:
        return deny("Only the organization owner can view its invitations.")
    return ALLOW


@rule(Action.respond_invitation)
def _respond_invitation(actor, invitation, context):
    if actor.id != invitation.invited_user_id:
        return deny("This invitation was not sent to you.")
    return ALLOW


@rule(Action.remove_member)
def _remove_member(actor, organization, context):
    member_id = context.get("member_id")
    if actor.id == organization.owner_id or actor.id == member_id:
        return ALLOW
    return deny("Only the organization owner can remove other members.")


# ---------- CONFERENCES ----------

@rule(Action.create_conference)
def _create_conference(actor, target, context):
    if actor.role != UserRole.organizer:
        return deny("Only organizers can create conferences.")
    organization = context.get("organization")
    if organization is not None and not is_org_member(organization, actor.id):
        return deny("Only members of the organization can create conferences for it.")
    return ALLOW


@rule(Action.update_conference, Action.delete_conference, Action.manage_attendees)
def _manage_conference(actor, conference, context):
    if actor.id != conference.organizer_id:
        return deny("Only the conference organizer can modify this conference.")
    return ALLOW


# ---------- PAPERS ----------

@rule(Action.submit_paper)
def _submit_paper(actor, target, context):
    if actor.role != UserRole.author:
        return deny("Only authors can submit papers.")
    return ALLOW


@rule(Action.remove_reviewer, Action.decide_paper)
def _manage_paper(actor, paper, context):
    if actor.role != UserRole.organizer:
        return deny("Only organizers can manage reviewers and decisions.")
    if not organizes(actor, context.get("organization")):
        return deny("You are not an organizer of this conference's organization.")
    return ALLOW


@rule(Action.assign_reviewer)
def _assign_reviewer(actor, paper, context):
    decision = _manage_paper(actor, paper, context)
    if not decision:
        return decision
    reviewer = context["reviewer"]
    # Membership is checked before role so a non-member is always denied the same way.
    if not is_org_member(context["organization"], reviewer.id):
        return deny("Reviewer is not a member of the conference organization")
    if reviewer.role != UserRole.reviewer:
        return deny("Only users with the reviewer role can be assigned to papers.")
    return ALLOW


# ---------- REVIEWS ----------

@rule(Action.create_review)
def _create_review(actor, paper, context):
    if actor.role != UserRole.reviewer:
        return deny("Only reviewers can submit reviews.")
    if actor.id not in (paper.reviewer_ids or []):
        return deny("You are not assigned to review this paper.")
    return ALLOW


@rule(Action.update_review)
def _update_review(actor, review, context):
    if actor.role != UserRole.reviewer:
        return deny("Only reviewers can update reviews.")
    if actor.id != review.reviewer_id:
        return deny("You can only edit your own reviews.")
    return ALLOW

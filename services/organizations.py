"""Organizations, membership and invitations."""
import logging

from models import InvitationStatus
from . import lifecycle
from .errors import DependencyFailure, NotFound
from .policy import Action, require
from .schemas import (
    parse, CreateOrganizationInput, UpdateOrganizationInput, CreateInvitationInput,
    RespondInvitationInput, RemoveMemberInput,
)
from .conferences import cascade_delete_conference

logger = logging.getLogger(__name__)


def get_organization(store, org_id):
    return store.get_or_raise("organizations", org_id, "Organization not found")


def list_organizations(store):
    return store.find("organizations")


def list_organizations_for_user(store, user_id):
    """Organizations the user owns or belongs to."""
    return [
        org for org in store.find("organizations")
        if org.owner_id == user_id or lifecycle.contains_id(org.member_ids, user_id)
    ]


def list_members(store, org_id):
    """Owner first, then members, as user records."""
    org = get_organization(store, org_id)
    members = []
    for user_id in [org.owner_id] + list(org.member_ids or []):
        user = store.find_by_id("users", user_id)
        if user is not None:
            members.append(user)
    return members


def create_organization(store, actor, payload):
    data = parse(CreateOrganizationInput, payload)
    require(actor, Action.create_organization)

    with store.transaction():
        org = store.insert("organizations", {
            "name": data.name,
            "logo_url": data.logo_url or "",
            "owner_id": actor.id,
            "member_ids": [],
        })

    logger.info("Organization %s (%s) created by %s", org.name, org.id, actor.id)
    return org


def update_organization(store, actor, org_id, payload):
    data = parse(UpdateOrganizationInput, payload)
    org = get_organization(store, org_id)
    require(actor, Action.update_organization, org)

    changes = data.model_dump(exclude_none=True)
    if not changes:
        return org

    with store.transaction():
        org = store.update("organizations", org.id, changes)
    return org


def delete_organization(store, actor, org_id):
    """Deletes the organization, its invitations and every conference it hosts."""
    org = get_organization(store, org_id)
    require(actor, Action.delete_organization, org)

    with store.transaction():
        conferences = store.find("conferences", organization_id=org.id)
        for conference in conferences:
            cascade_delete_conference(store, conference)
        store.delete_many("invitations", org_id=org.id)
        store.delete("organizations", org.id)

    logger.info("Organization %s deleted by %s (%d conferences removed)", org_id, actor.id, len(conferences))


def remove_member(store, actor, org_id, payload):
    """Owner removes a member, or a member leaves."""
    data = parse(RemoveMemberInput, payload)
    org = get_organization(store, org_id)
    require(actor, Action.remove_member, org, {"member_id": data.user_id})

    member_ids = lifecycle.remove_member(org, data.user_id)
    with store.transaction():
        org = store.update("organizations", org.id, {"member_ids": member_ids})
    return org


# ---------- INVITATIONS ----------

def get_invitation(store, invitation_id):
    return store.get_or_raise("invitations", invitation_id, "Invitation not found")


def list_invitations_for_user(store, user_id, status=None):
    filters = {"invited_user_id": user_id}
    if status is not None:
        filters["status"] = status
    return store.find("invitations", **filters)


def list_invitations_for_organization(store, actor, org_id):
    org = get_organization(store, org_id)
    require(actor, Action.list_invitations, org)
    return store.find("invitations", org_id=org.id)


def create_invitation(store, actor, org_id, payload):
    data = parse(CreateInvitationInput, payload)
    org = get_organization(store, org_id)
    require(actor, Action.create_invitation, org)

    invited = store.find_by_id("users", data.invited_user_id)
    if invited is None:
        raise NotFound("User not found")

    pending = store.find("invitations", org_id=org.id, invited_user_id=invited.id,
                         status=InvitationStatus.pending)
    lifecycle.ensure_invitable(org, invited.id, pending)

    with store.transaction():
        invitation = store.insert("invitations", {
            "org_id": org.id,
            "invited_user_id": invited.id,
            "invited_by_user_id": actor.id,
            "status": InvitationStatus.pending,
        })

    logger.info("User %s invited to organization %s by %s", invited.id, org.id, actor.id)
    return invitation


def respond_to_invitation(store, actor, invitation_id, payload):
    """Accept or decline. Accepting also adds the user to the organization."""
    data = parse(RespondInvitationInput, payload)
    invitation = get_invitation(store, invitation_id)
    require(actor, Action.respond_invitation, invitation)
    status = lifecycle.respond_to_invitation(invitation, data.status)

    if status != InvitationStatus.accepted:
        with store.transaction():
            invitation = store.update("invitations", invitation.id, {"status": status})
        logger.info("Invitation %s declined by %s", invitation.id, actor.id)
        return invitation

    org = get_organization(store, invitation.org_id)
    org_key, user_key = org.id, invitation.invited_user_id
    member_ids = lifecycle.add_member(org, user_key)
    try:
        with store.transaction():
            # Membership first: if the status write is lost the invitation stays
            # PENDING and accepting again repairs it.
            store.update("organizations", org_key, {"member_ids": member_ids})
            invitation = store.update("invitations", invitation.id, {"status": status})
    except DependencyFailure:
        logger.warning(
            "Reconciliation candidate: invitation %s accepted but membership of %s in %s may not be stored",
            invitation_id, user_key, org_key,
        )
        raise

    logger.info("Invitation %s accepted; %s joined organization %s", invitation.id, user_key, org_key)
    return invitation

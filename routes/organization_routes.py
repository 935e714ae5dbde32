from flask import Blueprint, request, jsonify, g
from models import InvitationStatus
from services import organizations, conferences
from services.errors import ValidationError
from .auth_routes import login_required, get_store

organization_bp = Blueprint("organization", __name__, url_prefix="/api")


# --- ORGANIZATIONS ---

@organization_bp.route("/organizations", methods=["GET", "POST"])
@login_required
def organizations_collection():
    store = get_store()
    if request.method == "POST":
        org = organizations.create_organization(store, g.user, request.get_json(silent=True))
        return jsonify(org.to_dict()), 201

    if request.args.get("mine") == "true":
        orgs = organizations.list_organizations_for_user(store, g.user.id)
    else:
        orgs = organizations.list_organizations(store)
    return jsonify([org.to_dict() for org in orgs])


@organization_bp.route("/organizations/<org_id>", methods=["GET", "PUT", "DELETE"])
@login_required
def organization_detail(org_id):
    store = get_store()
    if request.method == "PUT":
        org = organizations.update_organization(store, g.user, org_id, request.get_json(silent=True))
        return jsonify(org.to_dict())

    if request.method == "DELETE":
        organizations.delete_organization(store, g.user, org_id)
        return jsonify({"message": "Organization deleted."})

    return jsonify(organizations.get_organization(store, org_id).to_dict())


@organization_bp.route("/organizations/<org_id>/members")
@login_required
def organization_members(org_id):
    members = organizations.list_members(get_store(), org_id)
    return jsonify([user.to_dict() for user in members])


@organization_bp.route("/organizations/<org_id>/members/<user_id>", methods=["DELETE"])
@login_required
def remove_member(org_id, user_id):
    org = organizations.remove_member(get_store(), g.user, org_id, {"user_id": user_id})
    return jsonify(org.to_dict())


@organization_bp.route("/organizations/<org_id>/conferences")
@login_required
def organization_conferences(org_id):
    store = get_store()
    organizations.get_organization(store, org_id)
    confs = conferences.list_conferences_by_organization(store, org_id)
    return jsonify([conf.to_dict() for conf in confs])


# --- INVITATIONS ---

@organization_bp.route("/organizations/<org_id>/invitations", methods=["GET", "POST"])
@login_required
def organization_invitations(org_id):
    store = get_store()
    if request.method == "POST":
        invitation = organizations.create_invitation(store, g.user, org_id, request.get_json(silent=True))
        return jsonify(invitation.to_dict()), 201

    invitations = organizations.list_invitations_for_organization(store, g.user, org_id)
    return jsonify([invitation.to_dict() for invitation in invitations])


@organization_bp.route("/invitations")
@login_required
def my_invitations():
    """Invitations addressed to the logged-in user. ``?status=PENDING`` filters."""
    status_filter = request.args.get("status")
    status = None
    if status_filter:
        try:
            status = InvitationStatus(status_filter.upper())
        except ValueError:
            raise ValidationError("status: Invalid invitation status filter.") from None

    invitations = organizations.list_invitations_for_user(get_store(), g.user.id, status)
    return jsonify([invitation.to_dict() for invitation in invitations])


@organization_bp.route("/invitations/<invitation_id>", methods=["PUT"])
@login_required
def respond_to_invitation(invitation_id):
    invitation = organizations.respond_to_invitation(
        get_store(), g.user, invitation_id, request.get_json(silent=True)
    )
    return jsonify(invitation.to_dict())

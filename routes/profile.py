from flask import Blueprint, request, jsonify, g
from models import UserRole
from services import accounts
from services.errors import ValidationError
from .auth_routes import login_required, get_store

profile_bp = Blueprint("profile", __name__, url_prefix="/api")


@profile_bp.route("/profile", methods=["GET", "PUT"])
@login_required
def view_profile():
    """Handles viewing and updating the user's profile information."""
    if request.method == "PUT":
        user = accounts.update_profile(get_store(), g.user, request.get_json(silent=True))
        return jsonify({"user": user.to_dict()})

    return jsonify({"user": g.user.to_dict()})


@profile_bp.route("/profile/change-password", methods=["POST"])
@login_required
def change_password():
    accounts.change_password(get_store(), g.user, request.get_json(silent=True))
    return jsonify({"message": "Your password has been changed successfully!"})


@profile_bp.route("/users")
@login_required
def list_users():
    """User directory, used to pick invitees, reviewers and attendees. ``?role=REVIEWER`` filters."""
    role_filter = request.args.get("role")
    role = None
    if role_filter:
        try:
            role = UserRole(role_filter.upper())
        except ValueError:
            raise ValidationError("role: Invalid role filter.") from None

    users = accounts.list_users(get_store(), role)
    return jsonify([user.to_dict() for user in users])


@profile_bp.route("/users/<user_id>")
@login_required
def get_user(user_id):
    return jsonify(accounts.get_user(get_store(), user_id).to_dict())

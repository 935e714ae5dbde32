from flask import Blueprint, request, url_for, session, jsonify, g, current_app
from flask_mail import Message
from functools import wraps
from extensions import db, mail
from models import User
from services import accounts
from services.errors import ValidationError, DependencyFailure
from services.store import SqlAlchemyStore

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


# --- HELPERS ---

def get_store():
    """The entity store for the current request."""
    if "store" not in g:
        g.store = SqlAlchemyStore(db.session)
    return g.store


def login_required(f):
    """Decorator to ensure the user is logged in. Loads the actor into ``g.user``."""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Please log in to access this resource.", "type": "UNAUTHENTICATED"}), 401

        user = get_store().find_by_id("users", session["user_id"])
        if user is None:
            session.clear()
            return jsonify({"error": "Your session has expired. Please log in again.", "type": "UNAUTHENTICATED"}), 401

        g.user = user
        return f(*args, **kwargs)

    return decorated_function


def _start_session(user):
    session.clear()
    session["user_id"] = user.id
    session["user_role"] = user.role.value


# --- ROUTES ---

@auth_bp.route("/register", methods=["POST"])
def register():
    """Creates an account and sends the email confirmation link."""
    user = accounts.register_user(get_store(), request.get_json(silent=True))
    email_sent = send_verification_email(user)
    return jsonify({"user": user.to_dict(), "email_sent": email_sent}), 201


@auth_bp.route("/confirm/<token>", methods=["GET", "POST"])
def confirm_email(token):
    user_id = User.load_verification_token(token)
    if user_id is None:
        raise ValidationError("token: Confirmation link is invalid or expired.")

    user = accounts.confirm_email(get_store(), user_id)
    return jsonify({"user": user.to_dict()})


@auth_bp.route("/resend-confirmation", methods=["POST"])
def resend_confirmation():
    data = request.get_json(silent=True) or {}
    user = accounts.find_by_email(get_store(), str(data.get("email", "")))
    # Same answer whether or not the address is registered.
    if user is not None and not user.is_confirmed:
        send_verification_email(user)
    return jsonify({"message": "If the account exists and is unconfirmed, a new link has been sent."})


@auth_bp.route("/login", methods=["POST"])
def login():
    user = accounts.authenticate(get_store(), request.get_json(silent=True))
    _start_session(user)
    current_app.logger.info("User %s logged in", user.id)
    return jsonify({"user": user.to_dict()})


@auth_bp.route("/google", methods=["POST"])
def google_sign_in():
    """Signs in with a Google identity token; new identities must pick a role."""
    verifier = current_app.config.get("IDENTITY_VERIFIER")
    if verifier is None:
        raise DependencyFailure("Google sign-in is not configured on this server.")

    result = accounts.federated_sign_in(get_store(), request.get_json(silent=True), verifier)
    if result.needs_role:
        return jsonify({"needs_role": True, "email": result.email, "name": result.name}), 202

    _start_session(result.user)
    return jsonify({"needs_role": False, "user": result.user.to_dict()})


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    session.clear()
    return jsonify({"message": "You have been successfully logged out."})


@auth_bp.route("/me")
@login_required
def me():
    return jsonify({"user": g.user.to_dict()})


def send_verification_email(user):
    """Generates a token and sends the verification email to the user."""

    token = user.get_verification_token()

    msg = Message('Confirm Your Email Address for Confio',
                  recipients=[user.email])

    # Construct the verification link
    verify_url = url_for('auth.confirm_email', token=token, _external=True)
    expires_min = current_app.config.get('TOKEN_EXPIRATION_SEC', 1800) // 60

    msg.body = f"""
Dear {user.name},

Thank you for registering with Confio.
Please click the following link to confirm your email address and activate your account:

{verify_url}

This link will expire in {expires_min} minutes.

If you did not register for this service, please ignore this email.

The Confio Team
"""
    try:
        mail.send(msg)
        return True
    except Exception as e:
        current_app.logger.warning("MAIL SENDING FAILED for %s: %s", user.email, e)
        return False

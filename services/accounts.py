"""Registration, sign-in and profile operations."""
import logging
from dataclasses import dataclass

from werkzeug.security import generate_password_hash, check_password_hash

from models import AuthProvider
from .errors import Conflict, Unauthorized, ValidationError
from .schemas import (
    parse, RegisterInput, LoginInput, FederatedSignInInput, UpdateProfileInput, ChangePasswordInput,
)

logger = logging.getLogger(__name__)


@dataclass
class FederatedSignIn:
    """Outcome of a Google sign-in.

    ``user`` is None when the identity is new and no role was chosen yet; the
    caller must ask for one and retry with it.
    """
    email: str
    name: str
    user: object = None

    @property
    def needs_role(self):
        return self.user is None


def get_user(store, user_id):
    return store.get_or_raise("users", user_id, "User not found")


def list_users(store, role=None):
    if role is not None:
        return store.find("users", role=role)
    return store.find("users")


def find_by_email(store, email):
    return store.find_one("users", email=email.strip().lower())


def register_user(store, payload):
    """Creates an unconfirmed local account."""
    data = parse(RegisterInput, payload)

    if find_by_email(store, data.email):
        raise Conflict("An account with this email address already exists.")

    with store.transaction():
        user = store.insert("users", {
            "name": data.name,
            "surname": data.surname,
            "email": data.email,
            "password_hash": generate_password_hash(data.password),
            "role": data.role,
            "is_confirmed": False,
            "auth_provider": AuthProvider.local,
        })

    logger.info("Registered %s as %s", user.email, user.role.value)
    return user


def confirm_email(store, user_id):
    """Marks the account confirmed. Confirming twice is harmless."""
    user = get_user(store, user_id)
    if user.is_confirmed:
        return user

    with store.transaction():
        user = store.update("users", user.id, {"is_confirmed": True})

    logger.info("Confirmed email for %s", user.email)
    return user


def authenticate(store, payload):
    data = parse(LoginInput, payload)
    user = find_by_email(store, data.email)

    if not user or not user.password_hash or not check_password_hash(user.password_hash, data.password):
        raise Unauthorized("Invalid email or password.")

    if not user.is_confirmed:
        raise Unauthorized("Please confirm your email address before logging in.")

    return user


def federated_sign_in(store, payload, verifier):
    """Signs in with an identity already verified by ``verifier``.

    ``verifier(token)`` returns ``(email, name)`` or raises ``ValueError``.
    A first-time identity needs an explicit role before its account exists.
    """
    data = parse(FederatedSignInInput, payload)
    try:
        email, name = verifier(data.token)
    except ValueError as e:
        logger.info("Federated sign-in rejected: %s", e)
        raise Unauthorized("Google sign-in could not be verified.") from e

    email = email.strip().lower()
    name = (name or "").strip()
    user = find_by_email(store, email)
    if user is not None:
        if not user.is_confirmed:
            # The provider has verified the address.
            with store.transaction():
                user = store.update("users", user.id, {"is_confirmed": True})
        return FederatedSignIn(email=email, name=name, user=user)

    if data.role is None:
        return FederatedSignIn(email=email, name=name)

    first, _, last = name.partition(" ")
    with store.transaction():
        user = store.insert("users", {
            "name": first or email.split("@")[0],
            "surname": last or "-",
            "email": email,
            "password_hash": None,
            "role": data.role,
            "is_confirmed": True,
            "auth_provider": AuthProvider.google,
        })

    logger.info("Created %s account for %s via Google sign-in", user.role.value, user.email)
    return FederatedSignIn(email=email, name=name, user=user)


def update_profile(store, actor, payload):
    data = parse(UpdateProfileInput, payload)
    changes = data.model_dump(exclude_none=True)
    if not changes:
        return actor

    with store.transaction():
        user = store.update("users", actor.id, changes)
    return user


def change_password(store, actor, payload):
    data = parse(ChangePasswordInput, payload)

    if actor.auth_provider != AuthProvider.local or not actor.password_hash:
        raise ValidationError("current_password: this account signs in with Google and has no password.")

    if not check_password_hash(actor.password_hash, data.current_password):
        raise Unauthorized("Your current password is incorrect. Please try again.")

    with store.transaction():
        user = store.update("users", actor.id, {"password_hash": generate_password_hash(data.new_password)})

    logger.info("Password changed for %s", user.email)
    return user

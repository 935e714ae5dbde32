# tests/conftest.py
"""
Pytest configuration and fixtures.
Adds the project root to sys.path so `import app` / `import services` work without installing.
"""

import itertools
import sys
from pathlib import Path

import pytest
from werkzeug.security import generate_password_hash

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from app import create_app  # noqa: E402
from extensions import db  # noqa: E402
from instance.config import TestConfig  # noqa: E402
from models import UserRole, AuthProvider  # noqa: E402
from services.store import SqlAlchemyStore  # noqa: E402

PASSWORD = "correct-horse-42"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def store(app):
    return SqlAlchemyStore(db.session)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(store):
    """Factory for confirmed local accounts. ``make_user(UserRole.reviewer, name="Rita")``."""
    counter = itertools.count(1)

    def _make(role=UserRole.author, name=None, email=None, confirmed=True, **extra):
        n = next(counter)
        fields = {
            "name": name or f"User{n}",
            "surname": "Tester",
            "email": email or f"user{n}@example.org",
            "password_hash": generate_password_hash(PASSWORD),
            "role": role,
            "is_confirmed": confirmed,
            "auth_provider": AuthProvider.local,
        }
        fields.update(extra)
        with store.transaction():
            user = store.insert("users", fields)
        return user

    return _make


@pytest.fixture
def organizer(make_user):
    return make_user(UserRole.organizer, name="Olga")


@pytest.fixture
def author(make_user):
    return make_user(UserRole.author, name="Arun")


@pytest.fixture
def reviewer(make_user):
    return make_user(UserRole.reviewer, name="Rita")


@pytest.fixture
def login_as(client):
    """Puts ``user`` in the test client's session, as a successful login would."""

    def _login(user):
        with client.session_transaction() as sess:
            sess.clear()
            sess["user_id"] = user.id
            sess["user_role"] = user.role.value
        return client

    return _login

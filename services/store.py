"""
Entity store
============

The service layer talks to persistence only through an ``EntityStore``. The
store is passed explicitly into every service function; nothing in the core
reaches for a global session.

``SqlAlchemyStore`` is the production implementation over a Flask-SQLAlchemy
session. It is also the single place where identifiers are normalised: ids
coming in as numbers (legacy data, JSON bodies) are turned into their string
form here, so the core compares ids with plain ``==``.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import User, Organization, Invitation, Conference, Paper, Review
from .errors import Conflict, DependencyFailure, NotFound

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "users": User,
    "organizations": Organization,
    "invitations": Invitation,
    "conferences": Conference,
    "papers": Paper,
    "reviews": Review,
}

ID_LIST_FIELDS = frozenset({"member_ids", "reviewer_ids", "attendee_ids"})


def normalize_id(value):
    """Return the canonical string form of an identifier (``7`` and ``"7"`` are the same id)."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("Booleans are not identifiers")
    return str(value).strip()


def _is_id_field(name):
    return name == "id" or name.endswith("_id")


def _normalize_fields(fields):
    normalized = {}
    for key, value in fields.items():
        if key in ID_LIST_FIELDS:
            normalized[key] = [normalize_id(v) for v in (value or [])]
        elif _is_id_field(key):
            normalized[key] = normalize_id(value)
        else:
            normalized[key] = value
    return normalized


class EntityStore:
    """Persistence boundary used by the service layer."""

    def find(self, collection, **filters):
        raise NotImplementedError

    def find_by_id(self, collection, entity_id):
        raise NotImplementedError

    def insert(self, collection, fields):
        raise NotImplementedError

    def update(self, collection, entity_id, partial):
        raise NotImplementedError

    def delete(self, collection, entity_id):
        raise NotImplementedError

    def delete_many(self, collection, **filters):
        raise NotImplementedError

    def transaction(self):
        """Context manager committing all writes made inside it, or none."""
        raise NotImplementedError

    def get_or_raise(self, collection, entity_id, message):
        """``find_by_id`` that raises ``NotFound(message)`` when the id does not resolve."""
        record = self.find_by_id(collection, entity_id)
        if record is None:
            raise NotFound(message)
        return record


class SqlAlchemyStore(EntityStore):
    """``EntityStore`` backed by a (Flask-)SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    @staticmethod
    def _model(collection):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    @contextmanager
    def _reading(self, collection):
        try:
            yield
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning("Store read on %s failed: %s", collection, e)
            raise DependencyFailure("The data store is currently unavailable. Please try again.") from e

    def find(self, collection, **filters):
        model = self._model(collection)
        with self._reading(collection):
            query = self.session.query(model).filter_by(**_normalize_fields(filters))
            return query.order_by(model.created_at).all()

    def find_by_id(self, collection, entity_id):
        model = self._model(collection)
        if entity_id is None:
            return None
        with self._reading(collection):
            return self.session.get(model, normalize_id(entity_id))

    def find_one(self, collection, **filters):
        found = self.find(collection, **filters)
        return found[0] if found else None

    def insert(self, collection, fields):
        model = self._model(collection)
        record = model(**_normalize_fields(fields))
        self.session.add(record)
        # Flush so the generated id is available to the caller.
        self.session.flush()
        return record

    def update(self, collection, entity_id, partial):
        record = self.find_by_id(collection, entity_id)
        if record is None:
            return None
        for key, value in _normalize_fields(partial).items():
            if not hasattr(record, key):
                raise ValueError(f"{collection} has no field {key!r}")
            setattr(record, key, value)
        self.session.flush()
        return record

    def delete(self, collection, entity_id):
        record = self.find_by_id(collection, entity_id)
        if record is None:
            return False
        self.session.delete(record)
        self.session.flush()
        return True

    def delete_many(self, collection, **filters):
        records = self.find(collection, **filters)
        for record in records:
            self.session.delete(record)
        self.session.flush()
        return len(records)

    @contextmanager
    def transaction(self):
        """Commit everything written inside the block, or nothing at all."""
        try:
            yield self
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.info("Write rejected by store constraint: %s", e.orig)
            raise Conflict("The change conflicts with existing data.") from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning("Store write failed, transaction rolled back: %s", e)
            raise DependencyFailure("The data store is currently unavailable. Please try again.") from e
        except Exception:
            self.session.rollback()
            raise

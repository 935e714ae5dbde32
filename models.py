import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum

from flask import current_app
from itsdangerous import URLSafeTimedSerializer as Serializer, BadSignature, SignatureExpired

from extensions import db

TOKEN_EXPIRATION_SEC = 1800


def new_id():
    return uuid.uuid4().hex


def utcnow():
    return datetime.now(timezone.utc)


# ---------- ENUM DEFINITIONS ----------
class UserRole(PyEnum):
    organizer = "ORGANIZER"
    author = "AUTHOR"
    reviewer = "REVIEWER"


class AuthProvider(PyEnum):
    local = "local"
    google = "google"


class PaperStatus(PyEnum):
    submitted = "SUBMITTED"
    under_review = "UNDER_REVIEW"
    changes_requested = "CHANGES_REQUESTED"
    accepted = "ACCEPTED"
    rejected = "REJECTED"


class InvitationStatus(PyEnum):
    pending = "PENDING"
    accepted = "ACCEPTED"
    declined = "DECLINED"


class ReviewRecommendation(PyEnum):
    accept = "ACCEPT"
    reject = "REJECT"
    modify = "MODIFY"


class ConferenceType(PyEnum):
    online = "ONLINE"
    offline = "OFFLINE"
    hybrid = "HYBRID"


def _value(member):
    return member.value if member is not None else None


def _iso(value):
    return value.isoformat() if value is not None else None


# ---------- MODELS ----------
class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(120), nullable=False)
    surname = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256))
    role = db.Column(db.Enum(UserRole), nullable=False, index=True)
    profile_picture = db.Column(db.Text, default="")
    is_confirmed = db.Column(db.Boolean, default=False, nullable=False)
    auth_provider = db.Column(db.Enum(AuthProvider), default=AuthProvider.local, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def get_verification_token(self):
        """Generates a secure, timed token for email confirmation."""
        s = Serializer(current_app.config['SECRET_KEY'])
        return s.dumps({'user_id': self.id})

    @staticmethod
    def load_verification_token(token, expires_sec=None):
        """Returns the user id carried by a confirmation token, or None if invalid/expired."""
        if expires_sec is None:
            expires_sec = current_app.config.get('TOKEN_EXPIRATION_SEC', TOKEN_EXPIRATION_SEC)
        s = Serializer(current_app.config['SECRET_KEY'])
        try:
            data = s.loads(token, max_age=expires_sec)
        except (SignatureExpired, BadSignature):
            return None
        return data.get('user_id')

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "surname": self.surname,
            "email": self.email,
            "role": _value(self.role),
            "profile_picture": self.profile_picture or "",
            "is_confirmed": self.is_confirmed,
            "auth_provider": _value(self.auth_provider),
        }

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"


class Organization(db.Model):
    __tablename__ = "organizations"
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(200), nullable=False, index=True)
    logo_url = db.Column(db.Text, default="")
    owner_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False, index=True)
    # Owner is an implicit member and never appears here.
    member_ids = db.Column(db.JSON, default=list, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "logo_url": self.logo_url or "",
            "owner_id": self.owner_id,
            "member_ids": list(self.member_ids or []),
        }

    def __repr__(self):
        return f"<Organization {self.name}>"


class Invitation(db.Model):
    __tablename__ = "invitations"
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    org_id = db.Column(db.String(32), db.ForeignKey("organizations.id"), nullable=False, index=True)
    invited_user_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False, index=True)
    invited_by_user_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False)
    status = db.Column(db.Enum(InvitationStatus), default=InvitationStatus.pending, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "org_id": self.org_id,
            "invited_user_id": self.invited_user_id,
            "invited_by_user_id": self.invited_by_user_id,
            "status": _value(self.status),
        }

    def __repr__(self):
        return f"<Invitation {self.invited_user_id} -> {self.org_id} ({self.status.value})>"


class Conference(db.Model):
    __tablename__ = "conferences"
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    title = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    organizer_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False, index=True)
    organization_id = db.Column(db.String(32), db.ForeignKey("organizations.id"), nullable=True, index=True)
    start_date = db.Column(db.Date, nullable=False, index=True)
    end_date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=True)
    end_time = db.Column(db.Time, nullable=True)
    type = db.Column(db.Enum(ConferenceType), nullable=False)
    meeting_link = db.Column(db.String(500), default="")
    attendee_ids = db.Column(db.JSON, default=list, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "organizer_id": self.organizer_id,
            "organization_id": self.organization_id,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
            "type": _value(self.type),
            "meeting_link": self.meeting_link or "",
            "attendee_ids": list(self.attendee_ids or []),
        }

    def __repr__(self):
        return f"<Conference {self.title}>"


class Paper(db.Model):
    __tablename__ = "papers"
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    title = db.Column(db.String(250), nullable=False, index=True)
    abstract = db.Column(db.Text, nullable=False)
    file_url = db.Column(db.String(500), nullable=False)
    version = db.Column(db.Integer, default=1, nullable=False)
    status = db.Column(db.Enum(PaperStatus), default=PaperStatus.submitted, nullable=False, index=True)
    author_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False, index=True)
    conference_id = db.Column(db.String(32), db.ForeignKey("conferences.id"), nullable=False, index=True)
    reviewer_ids = db.Column(db.JSON, default=list, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "abstract": self.abstract,
            "file_url": self.file_url,
            "version": self.version,
            "status": _value(self.status),
            "author_id": self.author_id,
            "conference_id": self.conference_id,
            "reviewer_ids": list(self.reviewer_ids or []),
        }

    def __repr__(self):
        return f"<Paper {self.title} ({self.status.value})>"


class Review(db.Model):
    __tablename__ = "reviews"
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    paper_id = db.Column(db.String(32), db.ForeignKey("papers.id"), nullable=False, index=True)
    reviewer_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False, index=True)
    rating = db.Column(db.Integer, index=True)
    comment = db.Column(db.Text, default="")
    recommendation = db.Column(db.Enum(ReviewRecommendation))
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (db.UniqueConstraint('paper_id', 'reviewer_id', name='_paper_reviewer_uc'),)

    def to_dict(self):
        return {
            "id": self.id,
            "paper_id": self.paper_id,
            "reviewer_id": self.reviewer_id,
            "rating": self.rating,
            "comment": self.comment or "",
            "recommendation": _value(self.recommendation),
        }

    def __repr__(self):
        return f"<Review {self.id} - Rating {self.rating}>"

"""Per-operation input structs.

Each model lists exactly the fields a caller may set for that operation and
rejects anything else, so fields such as ``member_ids`` or ``status`` can only
change through their own workflows.
"""
import re
from datetime import date, time
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from models import UserRole, ConferenceType, ReviewRecommendation, PaperStatus, InvitationStatus
from .errors import ValidationError
from .store import normalize_id

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

Identifier = Annotated[str, BeforeValidator(normalize_id), Field(min_length=1)]
Text = Annotated[str, Field(min_length=1)]


def _enum_by_value(enum_cls):
    def convert(value):
        if isinstance(value, enum_cls):
            return value
        if isinstance(value, str):
            return enum_cls(value.strip().upper())
        return value
    return BeforeValidator(convert)


Role = Annotated[UserRole, _enum_by_value(UserRole)]
Kind = Annotated[ConferenceType, _enum_by_value(ConferenceType)]
Recommendation = Annotated[ReviewRecommendation, _enum_by_value(ReviewRecommendation)]
Decision = Annotated[PaperStatus, _enum_by_value(PaperStatus)]
Response = Annotated[InvitationStatus, _enum_by_value(InvitationStatus)]


class Input(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


def parse(schema, payload):
    """Validate ``payload`` against ``schema``; failures become ``ValidationError``."""
    if payload is None:
        payload = {}
    if isinstance(payload, schema):
        return payload
    if not isinstance(payload, dict):
        raise ValidationError("body: expected a JSON object.")
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        problems = []
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]) or "body"
            problems.append(f"{field}: {error['msg']}")
        raise ValidationError("; ".join(problems)) from None


# ---------- ACCOUNTS ----------

class RegisterInput(Input):
    name: Text
    surname: Text
    email: Text
    password: Annotated[str, Field(min_length=8)]
    role: Role

    @field_validator("email")
    @classmethod
    def _email(cls, value):
        value = value.lower()
        if not EMAIL_RE.match(value):
            raise ValueError("invalid email address")
        return value


class LoginInput(Input):
    email: Text
    password: Text

    @field_validator("email")
    @classmethod
    def _email(cls, value):
        return value.lower()


class FederatedSignInInput(Input):
    token: Text
    role: Optional[Role] = None


class UpdateProfileInput(Input):
    name: Optional[Text] = None
    surname: Optional[Text] = None
    profile_picture: Optional[str] = None


class ChangePasswordInput(Input):
    current_password: Text
    new_password: Annotated[str, Field(min_length=8)]
    confirm_password: Text

    @model_validator(mode="after")
    def _matches(self):
        if self.new_password != self.confirm_password:
            raise ValueError("The new passwords do not match.")
        return self


# ---------- ORGANIZATIONS ----------

class CreateOrganizationInput(Input):
    name: Text
    logo_url: Optional[str] = ""


class UpdateOrganizationInput(Input):
    name: Optional[Text] = None
    logo_url: Optional[str] = None


class CreateInvitationInput(Input):
    invited_user_id: Identifier


class RespondInvitationInput(Input):
    status: Response


class RemoveMemberInput(Input):
    user_id: Identifier


# ---------- CONFERENCES ----------

class _ConferenceDates(Input):

    @model_validator(mode="after")
    def _date_order(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("Start date cannot be after the end date.")
        return self


class CreateConferenceInput(_ConferenceDates):
    title: Text
    description: Text
    organization_id: Optional[Identifier] = None
    start_date: date
    end_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    type: Kind
    meeting_link: Optional[str] = ""


class UpdateConferenceInput(_ConferenceDates):
    title: Optional[Text] = None
    description: Optional[Text] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    type: Optional[Kind] = None
    meeting_link: Optional[str] = None


class AttendeeInput(Input):
    user_id: Identifier


# ---------- PAPERS & REVIEWS ----------

class SubmitPaperInput(Input):
    title: Text
    abstract: Text
    file_url: Text
    conference_id: Identifier


class AssignReviewerInput(Input):
    reviewer_id: Identifier


class DecidePaperInput(Input):
    status: Decision

    @field_validator("status")
    @classmethod
    def _decision(cls, value):
        if value not in (PaperStatus.changes_requested, PaperStatus.accepted, PaperStatus.rejected):
            raise ValueError("decision must be CHANGES_REQUESTED, ACCEPTED or REJECTED")
        return value


class ReviewInput(Input):
    rating: Optional[Annotated[int, Field(ge=1, le=10)]] = None
    comment: Optional[str] = None
    recommendation: Optional[Recommendation] = None

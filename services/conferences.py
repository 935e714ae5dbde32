"""Conferences and their attendee lists."""
import logging

from . import lifecycle
from .errors import NotFound, ValidationError
from .policy import Action, require
from .schemas import parse, CreateConferenceInput, UpdateConferenceInput, AttendeeInput

logger = logging.getLogger(__name__)


def get_conference(store, conf_id):
    return store.get_or_raise("conferences", conf_id, "Conference not found")


def list_conferences(store):
    return store.find("conferences")


def list_conferences_by_organization(store, org_id):
    return store.find("conferences", organization_id=org_id)


def create_conference(store, actor, payload):
    data = parse(CreateConferenceInput, payload)

    organization = None
    if data.organization_id is not None:
        organization = store.find_by_id("organizations", data.organization_id)
        if organization is None:
            raise NotFound("Organization not found")
    require(actor, Action.create_conference, None, {"organization": organization})

    with store.transaction():
        conference = store.insert("conferences", {
            "title": data.title,
            "description": data.description,
            "organizer_id": actor.id,
            "organization_id": data.organization_id,
            "start_date": data.start_date,
            "end_date": data.end_date,
            "start_time": data.start_time,
            "end_time": data.end_time,
            "type": data.type,
            "meeting_link": data.meeting_link or "",
            "attendee_ids": [],
        })

    logger.info("Conference %s (%s) created by %s", conference.title, conference.id, actor.id)
    return conference


def update_conference(store, actor, conf_id, payload):
    data = parse(UpdateConferenceInput, payload)
    conference = get_conference(store, conf_id)
    require(actor, Action.update_conference, conference)

    changes = data.model_dump(exclude_none=True)
    start_date = changes.get("start_date", conference.start_date)
    end_date = changes.get("end_date", conference.end_date)
    if start_date > end_date:
        raise ValidationError("end_date: Start date cannot be after the end date.")
    if not changes:
        return conference

    with store.transaction():
        conference = store.update("conferences", conference.id, changes)
    return conference


def cascade_delete_conference(store, conference):
    """Removes ``conference`` with its papers and their reviews. Runs inside the caller's transaction."""
    for paper in store.find("papers", conference_id=conference.id):
        store.delete_many("reviews", paper_id=paper.id)
        store.delete("papers", paper.id)
    store.delete("conferences", conference.id)


def delete_conference(store, actor, conf_id):
    conference = get_conference(store, conf_id)
    require(actor, Action.delete_conference, conference)

    with store.transaction():
        cascade_delete_conference(store, conference)

    logger.info("Conference %s deleted by %s", conf_id, actor.id)


def add_attendee(store, actor, conf_id, payload):
    data = parse(AttendeeInput, payload)
    conference = get_conference(store, conf_id)
    require(actor, Action.manage_attendees, conference)

    if store.find_by_id("users", data.user_id) is None:
        raise NotFound("User not found")

    attendee_ids = lifecycle.add_id(conference.attendee_ids, data.user_id)
    with store.transaction():
        conference = store.update("conferences", conference.id, {"attendee_ids": attendee_ids})
    return conference


def remove_attendee(store, actor, conf_id, payload):
    data = parse(AttendeeInput, payload)
    conference = get_conference(store, conf_id)
    require(actor, Action.manage_attendees, conference)

    attendee_ids = lifecycle.remove_id(conference.attendee_ids, data.user_id)
    with store.transaction():
        conference = store.update("conferences", conference.id, {"attendee_ids": attendee_ids})
    return conference

"""Paper submission, reviewer assignment and decisions."""
import logging

from models import PaperStatus
from . import lifecycle
from .errors import NotFound
from .policy import Action, require
from .schemas import parse, SubmitPaperInput, AssignReviewerInput, DecidePaperInput
from .store import normalize_id

logger = logging.getLogger(__name__)


def get_paper(store, paper_id):
    return store.get_or_raise("papers", paper_id, "Paper not found")


def list_papers_by_conference(store, conf_id):
    return store.find("papers", conference_id=conf_id)


def list_papers_by_author(store, author_id):
    return store.find("papers", author_id=author_id)


def list_papers_assigned_to(store, reviewer_id):
    # Assignment lives in a JSON list, so this is a scan over all papers.
    return [paper for paper in store.find("papers") if lifecycle.contains_id(paper.reviewer_ids, reviewer_id)]


def _paper_context(store, paper):
    """Resolves paper -> conference -> organization for the organizer checks."""
    conference = store.find_by_id("conferences", paper.conference_id)
    if conference is None or not conference.organization_id:
        raise NotFound("Conference or organization not found")
    organization = store.find_by_id("organizations", conference.organization_id)
    if organization is None:
        raise NotFound("Conference or organization not found")
    return {"conference": conference, "organization": organization}


def submit_paper(store, actor, payload):
    data = parse(SubmitPaperInput, payload)
    require(actor, Action.submit_paper)

    conference = store.find_by_id("conferences", data.conference_id)
    if conference is None:
        raise NotFound("Conference not found")

    with store.transaction():
        paper = store.insert("papers", {
            "title": data.title,
            "abstract": data.abstract,
            "file_url": data.file_url,
            "version": 1,
            "status": PaperStatus.submitted,
            "author_id": actor.id,
            "conference_id": conference.id,
            "reviewer_ids": [],
        })

    logger.info("Paper %s submitted to %s by %s", paper.id, conference.id, actor.id)
    return paper


def assign_reviewer(store, actor, paper_id, payload):
    data = parse(AssignReviewerInput, payload)
    paper = get_paper(store, paper_id)
    context = _paper_context(store, paper)

    reviewer = store.find_by_id("users", data.reviewer_id)
    if reviewer is None:
        raise NotFound("Reviewer not found")
    context["reviewer"] = reviewer

    require(actor, Action.assign_reviewer, paper, context)
    reviewer_ids, status = lifecycle.assign_reviewer(paper, reviewer.id)

    with store.transaction():
        paper = store.update("papers", paper.id, {"reviewer_ids": reviewer_ids, "status": status})

    logger.info("Reviewer %s assigned to paper %s by %s", reviewer.id, paper.id, actor.id)
    return paper


def remove_reviewer(store, actor, paper_id, reviewer_id):
    reviewer_id = normalize_id(reviewer_id)
    paper = get_paper(store, paper_id)
    context = _paper_context(store, paper)
    require(actor, Action.remove_reviewer, paper, context)

    reviewer_ids = lifecycle.unassign_reviewer(paper, reviewer_id)
    if reviewer_ids == list(paper.reviewer_ids or []):
        return paper

    with store.transaction():
        paper = store.update("papers", paper.id, {"reviewer_ids": reviewer_ids})

    logger.info("Reviewer %s removed from paper %s by %s", reviewer_id, paper.id, actor.id)
    return paper


def decide_paper(store, actor, paper_id, payload):
    data = parse(DecidePaperInput, payload)
    paper = get_paper(store, paper_id)
    context = _paper_context(store, paper)
    require(actor, Action.decide_paper, paper, context)

    status = lifecycle.decide(paper, data.status)
    with store.transaction():
        paper = store.update("papers", paper.id, {"status": status})

    logger.info("Paper %s decided as %s by %s", paper.id, status.value, actor.id)
    return paper

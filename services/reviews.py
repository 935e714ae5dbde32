"""Reviews. One review per (paper, reviewer); resubmitting updates it."""
import logging

from .policy import Action, require
from .schemas import parse, ReviewInput
from .papers import get_paper

logger = logging.getLogger(__name__)


def get_review(store, review_id):
    return store.get_or_raise("reviews", review_id, "Review not found")


def list_reviews_by_paper(store, paper_id):
    return store.find("reviews", paper_id=paper_id)


def list_reviews_by_reviewer(store, reviewer_id):
    return store.find("reviews", reviewer_id=reviewer_id)


def find_review(store, paper_id, reviewer_id):
    """The reviewer's review of the paper, or None."""
    return store.find_one("reviews", paper_id=paper_id, reviewer_id=reviewer_id)


def submit_review(store, actor, paper_id, payload):
    """Creates the actor's review of the paper, or updates it if one exists."""
    data = parse(ReviewInput, payload)
    paper = get_paper(store, paper_id)
    require(actor, Action.create_review, paper)

    existing = find_review(store, paper.id, actor.id)
    fields = data.model_dump(exclude_unset=True)

    with store.transaction():
        if existing is not None:
            review = store.update("reviews", existing.id, fields)
        else:
            review = store.insert("reviews", dict(fields, paper_id=paper.id, reviewer_id=actor.id))

    logger.info("Review %s for paper %s %s by %s", review.id, paper.id,
                "updated" if existing is not None else "created", actor.id)
    return review


def update_review(store, actor, review_id, payload):
    data = parse(ReviewInput, payload)
    review = get_review(store, review_id)
    require(actor, Action.update_review, review)

    fields = data.model_dump(exclude_unset=True)
    if not fields:
        return review

    with store.transaction():
        review = store.update("reviews", review.id, fields)
    return review

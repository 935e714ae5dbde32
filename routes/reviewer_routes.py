from flask import Blueprint, request, jsonify, g
from services import papers, reviews
from .auth_routes import login_required, get_store

reviewer_bp = Blueprint("reviewer", __name__, url_prefix="/api")


# --- REVIEWER ROUTES GO HERE ---

@reviewer_bp.route("/reviewer/papers")
@login_required
def assigned_papers():
    """Papers the logged-in reviewer is assigned to."""
    assigned = papers.list_papers_assigned_to(get_store(), g.user.id)
    return jsonify([paper.to_dict() for paper in assigned])


@reviewer_bp.route("/papers/<paper_id>/reviews", methods=["GET", "POST"])
@login_required
def paper_reviews(paper_id):
    store = get_store()
    if request.method == "POST":
        existed = reviews.find_review(store, paper_id, g.user.id) is not None
        review = reviews.submit_review(store, g.user, paper_id, request.get_json(silent=True))
        return jsonify(review.to_dict()), 200 if existed else 201

    paper = papers.get_paper(store, paper_id)
    return jsonify([review.to_dict() for review in reviews.list_reviews_by_paper(store, paper.id)])


@reviewer_bp.route("/reviews/mine")
@login_required
def my_reviews():
    return jsonify([review.to_dict() for review in reviews.list_reviews_by_reviewer(get_store(), g.user.id)])


@reviewer_bp.route("/reviews/<review_id>", methods=["PUT"])
@login_required
def update_review(review_id):
    review = reviews.update_review(get_store(), g.user, review_id, request.get_json(silent=True))
    return jsonify(review.to_dict())

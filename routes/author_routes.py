from flask import Blueprint, request, jsonify, g
from services import papers, reviews
from .auth_routes import login_required, get_store

author_bp = Blueprint("author", __name__, url_prefix="/api")


# --- AUTHOR ROUTES GO HERE ---

@author_bp.route("/papers", methods=["POST"])
@login_required
def submit_paper():
    """Submits a paper to a conference. The paper starts out SUBMITTED, version 1."""
    paper = papers.submit_paper(get_store(), g.user, request.get_json(silent=True))
    return jsonify(paper.to_dict()), 201


@author_bp.route("/papers/mine")
@login_required
def my_papers():
    return jsonify([paper.to_dict() for paper in papers.list_papers_by_author(get_store(), g.user.id)])


@author_bp.route("/papers/<paper_id>")
@login_required
def paper_detail(paper_id):
    store = get_store()
    paper = papers.get_paper(store, paper_id)
    data = paper.to_dict()
    data["review_count"] = len(reviews.list_reviews_by_paper(store, paper.id))
    return jsonify(data)

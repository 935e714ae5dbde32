from flask import Blueprint, request, jsonify, g
from services import papers
from .auth_routes import login_required, get_store

organizer_bp = Blueprint("organizer", __name__, url_prefix="/api")


# --- REVIEWER ASSIGNMENT ---

@organizer_bp.route("/papers/<paper_id>/reviewers", methods=["POST"])
@login_required
def assign_reviewer(paper_id):
    """Assigns a reviewer from the conference's organization and moves the paper UNDER_REVIEW."""
    paper = papers.assign_reviewer(get_store(), g.user, paper_id, request.get_json(silent=True))
    return jsonify(paper.to_dict())


@organizer_bp.route("/papers/<paper_id>/reviewers/<reviewer_id>", methods=["DELETE"])
@login_required
def remove_reviewer(paper_id, reviewer_id):
    paper = papers.remove_reviewer(get_store(), g.user, paper_id, reviewer_id)
    return jsonify(paper.to_dict())


# --- DECISIONS ---

@organizer_bp.route("/papers/<paper_id>/decision", methods=["PUT"])
@login_required
def decide_paper(paper_id):
    paper = papers.decide_paper(get_store(), g.user, paper_id, request.get_json(silent=True))
    return jsonify(paper.to_dict())

from flask import Blueprint, request, jsonify, g
from services import conferences, papers
from .auth_routes import login_required, get_store

conference_bp = Blueprint("conference", __name__, url_prefix="/api")


@conference_bp.route("/conferences", methods=["GET", "POST"])
@login_required
def conferences_collection():
    store = get_store()
    if request.method == "POST":
        conf = conferences.create_conference(store, g.user, request.get_json(silent=True))
        return jsonify(conf.to_dict()), 201

    org_id = request.args.get("organization_id")
    if org_id:
        confs = conferences.list_conferences_by_organization(store, org_id)
    else:
        confs = conferences.list_conferences(store)
    return jsonify([conf.to_dict() for conf in confs])


@conference_bp.route("/conferences/<conf_id>", methods=["GET", "PUT", "DELETE"])
@login_required
def conference_detail(conf_id):
    store = get_store()
    if request.method == "PUT":
        conf = conferences.update_conference(store, g.user, conf_id, request.get_json(silent=True))
        return jsonify(conf.to_dict())

    if request.method == "DELETE":
        conferences.delete_conference(store, g.user, conf_id)
        return jsonify({"message": "Conference deleted."})

    return jsonify(conferences.get_conference(store, conf_id).to_dict())


@conference_bp.route("/conferences/<conf_id>/attendees", methods=["POST"])
@login_required
def add_attendee(conf_id):
    conf = conferences.add_attendee(get_store(), g.user, conf_id, request.get_json(silent=True))
    return jsonify(conf.to_dict())


@conference_bp.route("/conferences/<conf_id>/attendees/<user_id>", methods=["DELETE"])
@login_required
def remove_attendee(conf_id, user_id):
    conf = conferences.remove_attendee(get_store(), g.user, conf_id, {"user_id": user_id})
    return jsonify(conf.to_dict())


@conference_bp.route("/conferences/<conf_id>/papers")
@login_required
def conference_papers(conf_id):
    """Papers submitted to the conference."""
    store = get_store()
    conferences.get_conference(store, conf_id)
    return jsonify([paper.to_dict() for paper in papers.list_papers_by_conference(store, conf_id)])

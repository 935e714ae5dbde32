import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from instance.config import Config
from extensions import db, mail, migrate
from services.errors import ServiceError
from routes.auth_routes import auth_bp
from routes.profile import profile_bp
from routes.organization_routes import organization_bp
from routes.conference_routes import conference_bp
from routes.author_routes import author_bp
from routes.organizer_routes import organizer_bp
from routes.reviewer_routes import reviewer_bp


def create_app(config_object=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    mail.init_app(app)
    migrate.init_app(app, db)

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(organization_bp)
    app.register_blueprint(conference_bp)
    app.register_blueprint(author_bp)
    app.register_blueprint(organizer_bp)
    app.register_blueprint(reviewer_bp)

    @app.errorhandler(ServiceError)
    def handle_service_error(err):
        if err.status_code >= 500:
            app.logger.warning("%s", err)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({"error": err.description, "type": err.name.upper().replace(" ", "_")}), err.code

    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok"})

    with app.app_context():
        db.create_all()

    return app


if __name__ == "__main__":
    create_app().run(debug=True)

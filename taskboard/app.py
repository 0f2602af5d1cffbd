import os

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from taskboard.config import DEFAULT_JWT_SECRET


def _register_jwt_handlers(jwt: JWTManager) -> None:
    """Answer auth failures in the same JSON shape as the task routes."""

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify(message=f"Authentication required: {reason}"), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify(message=f"Invalid token: {reason}"), 401

    @jwt.expired_token_loader
    def expired_token(_jwt_header, _jwt_payload):
        return jsonify(message="Token has expired"), 401


def create_app(test_config=None, mongo_client=None):
    app = Flask(__name__)
    app.config.from_object("taskboard.config.Config")
    if test_config:
        app.config.update(test_config)

    app.json.sort_keys = False
    app.logger.setLevel(str(app.config["LOG_LEVEL"]).upper())

    api_prefix = app.config["API_PREFIX"].rstrip("/")

    # Core extensions
    CORS(app, resources={rf"{api_prefix}/*": {"origins": app.config["CORS_ORIGINS"]}})
    jwt = JWTManager(app)
    _register_jwt_handlers(jwt)

    if app.config["JWT_SECRET_KEY"] == DEFAULT_JWT_SECRET and not app.testing:
        app.logger.warning("JWT_SECRET_KEY is not set; using the development default.")

    from taskboard.utils.db import init_app as init_db

    init_db(app, client=mongo_client)

    # Register blueprints
    from taskboard.routes.task_routes import tasks_bp

    app.register_blueprint(tasks_bp, url_prefix=f"{api_prefix}/tasks")

    @app.get(f"{api_prefix}/health")
    def health():
        return jsonify(status="ok", service="Taskboard API"), 200

    @app.errorhandler(404)
    def not_found(_):
        return jsonify(message="Not Found"), 404

    @app.errorhandler(405)
    def method_not_allowed(_):
        return jsonify(message="Method Not Allowed"), 405

    @app.errorhandler(500)
    def server_error(_):
        return jsonify(message="Internal Server Error"), 500

    return app


if __name__ == "__main__":
    # Direct run support: python -m taskboard.app
    app = create_app()
    app.run(
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "5000")),
        debug=app.config["DEBUG"],
    )

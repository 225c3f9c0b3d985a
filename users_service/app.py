import logging
import re

from flask import Blueprint, Flask, current_app, jsonify, request, send_from_directory
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from .config import (
    load_env_file,
    load_settings,
    log_level_from_env,
    static_dir_from_env,
)
from .models import UserPayload, now_rfc3339
from .store import InvalidUser, UserNotFound, UserStore

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type"]

ENDPOINTS = [
    ("GET", "/", "Frontend (User Management)"),
    ("GET", f"{API_PREFIX}/home", "API Home page"),
    ("GET", f"{API_PREFIX}/health", "Health check"),
    ("GET", f"{API_PREFIX}/users", "Get all users"),
    ("POST", f"{API_PREFIX}/users", "Create new user"),
    ("GET", f"{API_PREFIX}/users/{{id}}", "Get user by ID"),
    ("PUT", f"{API_PREFIX}/users/{{id}}", "Update user by ID"),
    ("DELETE", f"{API_PREFIX}/users/{{id}}", "Delete user by ID"),
]

api = Blueprint("api", __name__, url_prefix=API_PREFIX)


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------
def _store() -> UserStore:
    return current_app.extensions["user_store"]


def _text(message: str, status: int):
    return message, status, {"Content-Type": "text/plain; charset=utf-8"}


ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def _parse_id(raw: str):
    # optional sign and ASCII digits only: "1_0", " 1" and "\u0661" are rejected
    if not ID_PATTERN.fullmatch(raw):
        return None
    return int(raw)


def _parse_body():
    """Decode the request body as a user payload, or None if it is not one."""
    try:
        return UserPayload.model_validate_json(request.get_data())
    except ValidationError:
        return None


# ---------------------------------------------------------------------
# Info endpoints
# ---------------------------------------------------------------------
@api.route("/home", methods=["GET"])
def home():
    return jsonify({
        "message": "Welcome to the Simple API",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "health": f"{API_PREFIX}/health",
            "users": f"{API_PREFIX}/users",
        },
    }), 200


@api.route("/health", methods=["GET"])
def health():
    return jsonify({
        "status": "healthy",
        "service": "users-service",
        "timestamp": now_rfc3339(),
        "uptime": "running",
    }), 200


# ---------------------------------------------------------------------
# Users CRUD
# ---------------------------------------------------------------------
@api.route("/users", methods=["GET"])
def list_users():
    return jsonify([u.model_dump() for u in _store().list()]), 200


@api.route("/users", methods=["POST"])
def create_user():
    payload = _parse_body()
    if payload is None:
        logger.warning("Create rejected: invalid JSON")
        return _text("Invalid JSON", 400)

    try:
        user = _store().create(payload.name, payload.email)
    except InvalidUser as e:
        logger.warning("Create rejected: %s", e)
        return _text(str(e), 400)

    logger.info("User created: id=%d", user.id)
    return jsonify(user.model_dump()), 201


@api.route("/users/<user_id>", methods=["GET"])
def get_user(user_id):
    uid = _parse_id(user_id)
    if uid is None:
        return _text("Invalid user ID", 400)

    user = _store().get(uid)
    if user is None:
        logger.warning("User not found: id=%d", uid)
        return _text("User not found", 404)
    return jsonify(user.model_dump()), 200


@api.route("/users/<user_id>", methods=["PUT"])
def update_user(user_id):
    uid = _parse_id(user_id)
    if uid is None:
        return _text("Invalid user ID", 400)

    payload = _parse_body()
    if payload is None:
        logger.warning("Update rejected: invalid JSON (id=%d)", uid)
        return _text("Invalid JSON", 400)

    try:
        user = _store().update(uid, payload.name, payload.email)
    except UserNotFound:
        logger.warning("User not found for update: id=%d", uid)
        return _text("User not found", 404)
    except InvalidUser as e:
        logger.warning("Update rejected: %s (id=%d)", e, uid)
        return _text(str(e), 400)

    logger.info("User updated: id=%d", uid)
    return jsonify(user.model_dump()), 200


@api.route("/users/<user_id>", methods=["DELETE"])
def delete_user(user_id):
    uid = _parse_id(user_id)
    if uid is None:
        return _text("Invalid user ID", 400)

    try:
        _store().delete(uid)
    except UserNotFound:
        logger.warning("User not found for deletion: id=%d", uid)
        return _text("User not found", 404)

    logger.info("User deleted: id=%d", uid)
    return "", 204


# ---------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------
def create_app(store=None, static_dir=None) -> Flask:
    app = Flask(
        __name__,
        static_folder=static_dir or static_dir_from_env(),
        static_url_path="/static",
    )
    app.json.sort_keys = False
    app.extensions["user_store"] = store if store is not None else UserStore.seeded()

    # permissive CORS for the frontend and anything else (demo-safe)
    CORS(
        app,
        resources={r"/*": {"origins": "*"}},
        methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        send_wildcard=True,
    )

    @app.before_request
    def answer_preflight():
        if request.method == "OPTIONS":
            return "", 200

    @app.after_request
    def add_cors_headers(response):
        # flask-cors only sends these on preflight responses
        response.headers.setdefault(
            "Access-Control-Allow-Methods", ", ".join(CORS_METHODS)
        )
        response.headers.setdefault(
            "Access-Control-Allow-Headers", ", ".join(CORS_HEADERS)
        )
        return response

    @app.errorhandler(HTTPException)
    def plain_http_error(e):
        response = e.get_response()
        response.set_data(f"{e.code} {e.name}")
        response.content_type = "text/plain; charset=utf-8"
        return response

    app.register_blueprint(api)

    @app.route("/", methods=["GET"])
    def frontend():
        return send_from_directory(app.static_folder, "index.html")

    return app


def configure_logging():
    logging.basicConfig(
        level=log_level_from_env(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    settings = load_settings()
    if not ENV_FILE_LOADED:
        logger.warning(".env file not found, using default values")

    logger.info("Server starting on %s:%d", settings.host, settings.port)
    logger.info("Available endpoints:")
    for method, path, description in ENDPOINTS:
        logger.info("  %-6s %-20s - %s", method, path, description)
    logger.info("Frontend available at: http://%s:%d/", settings.host, settings.port)

    app.run(host=settings.host, port=settings.port, threaded=True)


# .env and logging apply to the module-level app too, as served by gunicorn
ENV_FILE_LOADED = load_env_file()
configure_logging()
app = create_app()


if __name__ == "__main__":
    main()

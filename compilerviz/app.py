import logging
import random

from flask import Flask, Response, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .config import DefaultConfig
from .errors import CompilerVizError, InvalidRequest
from .export import export
from .session import SessionStore
from .stepper import navigate
from .visualize import visualize


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(DefaultConfig)
    app.config.from_prefixed_env("COMPILERVIZ")
    if test_config:
        app.config.from_mapping(test_config)

    CORS(app, origins=app.config["CORS_ORIGINS"])  # front end may be served elsewhere
    logging.getLogger("compilerviz").setLevel(app.config["LOG_LEVEL"])

    seed = app.config["DURATION_SEED"]
    app.extensions["session_store"] = SessionStore(
        app.config["SESSION_ROOT"], rng=random.Random(seed)
    )

    register_routes(app)
    return app


def store():
    return current_app.extensions["session_store"]


def require_session_id():
    session_id = request.args.get("session_id", "")
    if not session_id:
        raise InvalidRequest("No session ID provided")
    return session_id


def register_routes(app):
    @app.errorhandler(CompilerVizError)
    def handle_error(e):
        return jsonify({"success": False, "error": e.message}), e.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "error": e.description}), e.code
        app.logger.exception("unexpected error on %s", request.path)
        return jsonify({"success": False, "error": "Internal server error"}), 500

    @app.route("/api/compile", methods=["POST"])
    def compile_code():
        data = request.get_json(silent=True)
        source = data.get("source_code", "") if isinstance(data, dict) else ""
        if not isinstance(source, str):
            raise InvalidRequest("source_code must be a string")
        if len(source.encode("utf-8")) > app.config["MAX_SOURCE_BYTES"]:
            raise InvalidRequest("Source code is too large")
        session = store().create(source)
        return jsonify(session)

    @app.route("/api/step", methods=["GET"])
    def step():
        session_id = require_session_id()
        current = request.args.get("step", 0, type=int)
        action = request.args.get("action", "next")
        to = request.args.get("to", None, type=int)
        session = store().load(session_id)
        return jsonify(navigate(session, current, action, to))

    @app.route("/api/visualize", methods=["GET"])
    def visualize_stage():
        session_id = require_session_id()
        stage = request.args.get("stage", "all")
        session = store().load(session_id)
        return jsonify(visualize(session, stage, store().rng))

    @app.route("/api/download", methods=["GET"])
    def download():
        session_id = require_session_id()
        artifact = request.args.get("type", "")
        fmt = request.args.get("format", "json")
        if not artifact:
            raise InvalidRequest("Missing parameters")
        session = store().load(session_id)
        result = export(session, artifact, fmt)
        if artifact == "all":
            store().write_archive(session_id, result.content)
        return Response(
            result.content,
            mimetype=result.mimetype,
            headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
        )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_app().run(debug=True)

"""The HTTP application: routes, handlers, CORS and the server entry point."""

from __future__ import annotations

import argparse
import functools
import hashlib
import json
import logging
import os
import secrets
import sqlite3
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
from flask import Blueprint, Flask, Response, request

from notely import database as db
from notely.auth import AuthError, get_api_key
from notely.models import (
    database_note_to_note,
    database_notes_to_notes,
    database_user_to_user,
)
from notely.responses import respond_with_error, respond_with_json

logger = logging.getLogger(__name__)

_STATIC_INDEX = Path(__file__).parent / "static" / "index.html"

_ALLOWED_ORIGIN_PREFIXES = ("https://", "http://")
_ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "OPTIONS"})
_EXPOSED_HEADERS = "Link"
_MAX_AGE = "300"


class _BadParameters(ValueError):
    """The request body could not be decoded into the expected parameters."""


def generate_random_sha256_hash() -> str:
    """Return the hex SHA-256 digest of 32 random bytes."""
    return hashlib.sha256(secrets.token_bytes(32)).hexdigest()


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _decode_string_field(name: str) -> str:
    try:
        body = json.loads(request.get_data())
    except ValueError as exc:
        raise _BadParameters(str(exc)) from exc
    if not isinstance(body, dict):
        raise _BadParameters("request body is not a JSON object")
    value = body.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _BadParameters(f"field {name!r} is not a string")
    return value


def _origin_allowed(origin: str) -> bool:
    return origin.lower().startswith(_ALLOWED_ORIGIN_PREFIXES)


def _is_preflight() -> bool:
    return request.method == "OPTIONS" and bool(
        request.headers.get("Access-Control-Request-Method")
    )


def _handle_preflight() -> Response | None:
    if not _is_preflight():
        return None
    resp = Response(status=200)
    for vary in ("Origin", "Access-Control-Request-Method", "Access-Control-Request-Headers"):
        resp.headers.add("Vary", vary)
    origin = request.headers.get("Origin", "")
    if not origin or not _origin_allowed(origin):
        return resp
    method = request.headers["Access-Control-Request-Method"].upper()
    if method not in _ALLOWED_METHODS:
        return resp
    resp.headers["Access-Control-Allow-Origin"] = origin
    resp.headers["Access-Control-Allow-Methods"] = method
    requested = [
        part.strip()
        for part in request.headers.get("Access-Control-Request-Headers", "").split(",")
        if part.strip()
    ]
    if requested:
        resp.headers["Access-Control-Allow-Headers"] = ", ".join(requested)
    resp.headers["Access-Control-Max-Age"] = _MAX_AGE
    return resp


def _add_cors_headers(resp: Response) -> Response:
    if _is_preflight():
        return resp
    resp.headers.add("Vary", "Origin")
    origin = request.headers.get("Origin", "")
    if not origin or not _origin_allowed(origin):
        return resp
    if request.method.upper() not in _ALLOWED_METHODS:
        return resp
    resp.headers["Access-Control-Allow-Origin"] = origin
    resp.headers["Access-Control-Expose-Headers"] = _EXPOSED_HEADERS
    return resp


def _serve_index() -> Response:
    try:
        data = _STATIC_INDEX.read_bytes()
    except OSError as exc:
        resp = Response(f"{exc}\n", status=500, content_type="text/plain; charset=utf-8")
        resp.headers["X-Content-Type-Options"] = "nosniff"
        return resp
    return Response(data, status=200, content_type="text/html; charset=utf-8")


def _handler_readiness() -> Response:
    return respond_with_json(200, {"status": "ok"})


def _v1_blueprint(queries: db.Queries | None) -> Blueprint:
    v1 = Blueprint("v1", __name__, url_prefix="/v1")

    if queries is not None:

        def authed(handler: Callable[[db.User], Response]) -> Callable[[], Response]:
            @functools.wraps(handler)
            def wrapper() -> Response:
                try:
                    api_key = get_api_key(request.headers)
                except AuthError as exc:
                    return respond_with_error(401, "Couldn't find api key", exc)
                try:
                    user = queries.get_user(api_key)
                except (db.NotFoundError, sqlite3.Error) as exc:
                    return respond_with_error(404, "Couldn't get user", exc)
                return handler(user)

            return wrapper

        def users_create() -> Response:
            try:
                name = _decode_string_field("name")
            except _BadParameters as exc:
                return respond_with_error(500, "Couldn't decode parameters", exc)
            api_key = generate_random_sha256_hash()
            now = _now()
            try:
                queries.create_user(
                    db.User(
                        id=str(uuid.uuid4()),
                        created_at=now,
                        updated_at=now,
                        name=name,
                        api_key=api_key,
                    )
                )
            except sqlite3.Error as exc:
                return respond_with_error(500, "Couldn't create user", exc)
            try:
                user = queries.get_user(api_key)
            except (db.NotFoundError, sqlite3.Error) as exc:
                return respond_with_error(500, "Couldn't get user", exc)
            try:
                user_resp = database_user_to_user(user)
            except ValueError as exc:
                return respond_with_error(500, "Couldn't convert user", exc)
            return respond_with_json(201, user_resp)

        @authed
        def users_get(user: db.User) -> Response:
            try:
                user_resp = database_user_to_user(user)
            except ValueError as exc:
                return respond_with_error(500, "Couldn't convert user", exc)
            return respond_with_json(200, user_resp)

        @authed
        def notes_get(user: db.User) -> Response:
            try:
                notes = queries.get_notes_for_user(user.id)
            except sqlite3.Error as exc:
                return respond_with_error(500, "Couldn't get posts for user", exc)
            try:
                notes_resp = database_notes_to_notes(notes)
            except ValueError as exc:
                return respond_with_error(500, "Couldn't convert posts", exc)
            return respond_with_json(200, notes_resp)

        @authed
        def notes_create(user: db.User) -> Response:
            try:
                text = _decode_string_field("note")
            except _BadParameters as exc:
                return respond_with_error(500, "Couldn't decode parameters", exc)
            note_id = str(uuid.uuid4())
            now = _now()
            try:
                queries.create_note(
                    db.Note(
                        id=note_id,
                        created_at=now,
                        updated_at=now,
                        note=text,
                        user_id=user.id,
                    )
                )
            except sqlite3.Error as exc:
                return respond_with_error(500, "Couldn't create note", exc)
            try:
                note = queries.get_note(note_id)
            except (db.NotFoundError, sqlite3.Error) as exc:
                return respond_with_error(404, "Couldn't get note", exc)
            try:
                note_resp = database_note_to_note(note)
            except ValueError as exc:
                return respond_with_error(500, "Couldn't convert note", exc)
            return respond_with_json(201, note_resp)

        v1.add_url_rule("/users", "users_create", users_create, methods=["POST"])
        v1.add_url_rule("/users", "users_get", users_get, methods=["GET"])
        v1.add_url_rule("/notes", "notes_get", notes_get, methods=["GET"])
        v1.add_url_rule("/notes", "notes_create", notes_create, methods=["POST"])

    v1.add_url_rule("/healthz", "healthz", _handler_readiness, methods=["GET"])
    return v1


def create_app(queries: db.Queries | None) -> Flask:
    """Build the application; without *queries* only the non-CRUD routes exist."""
    app = Flask(__name__)
    app.before_request(_handle_preflight)
    app.after_request(_add_cors_headers)
    app.add_url_rule("/", "index", _serve_index, methods=["GET"])
    app.register_blueprint(_v1_blueprint(queries))
    return app


def main(argv: list[str] | None = None) -> int:
    """Load configuration from the environment and serve the API."""
    parser = argparse.ArgumentParser(prog="notely", description="Serve the notes API.")
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    env_path = Path(".env")
    if env_path.is_file():
        load_dotenv(env_path)
    else:
        logger.warning("warning: assuming default configuration. .env unreadable: %s", env_path)

    port = os.environ.get("PORT", "")
    if not port:
        logger.critical("PORT environment variable is not set")
        return 1
    try:
        port_number = int(port)
    except ValueError:
        logger.critical("PORT environment variable is not a number: %s", port)
        return 1

    queries: db.Queries | None = None
    db_url = os.environ.get("DATABASE_URL", "")
    if not db_url:
        logger.info("DATABASE_URL environment variable is not set")
        logger.info("Running without CRUD endpoints")
    else:
        try:
            queries = db.connect(db_url)
            queries.create_schema()
        except (ValueError, sqlite3.Error) as exc:
            logger.critical("%s", exc)
            return 1
        logger.info("Connected to database!")

    app = create_app(queries)
    logger.info("Serving on port: %s", port)
    app.run(host="0.0.0.0", port=port_number)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
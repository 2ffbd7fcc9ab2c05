"""JSON HTTP responses in the shape the API returns them."""

from __future__ import annotations

import json
import logging
from typing import Any

from flask import Response

logger = logging.getLogger(__name__)

_JSON_MIMETYPE = "application/json"

# Characters escaped inside strings so the output is safe to embed in HTML.
_ESCAPE_TABLE = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)


def _to_jsonable(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _marshal(payload: Any) -> bytes:
    text = json.dumps(
        payload,
        default=_to_jsonable,
        ensure_ascii=False,
        allow_nan=False,
        separators=(",", ":"),
    )
    return text.translate(_ESCAPE_TABLE).encode("utf-8")


def respond_with_json(code: int, payload: Any) -> Response:
    """Serialise *payload* as compact JSON with status *code*.

    Objects with a ``to_dict`` method are serialised through it. If the payload
    cannot be serialised, an empty 500 response is returned instead.
    """
    try:
        body = _marshal(payload)
    except (TypeError, ValueError) as exc:
        logger.error("Error marshalling JSON: %s", exc)
        return Response(b"", status=500, mimetype=_JSON_MIMETYPE)
    return Response(body, status=code, mimetype=_JSON_MIMETYPE)


def respond_with_error(code: int, msg: str, log_err: BaseException | None) -> Response:
    """Log the cause and return ``{"error": msg}`` with status *code*."""
    if log_err is not None:
        logger.error("%s", log_err)
    if code > 499:
        logger.error("Responding with 5XX error: %s", msg)
    return respond_with_json(code, {"error": msg})
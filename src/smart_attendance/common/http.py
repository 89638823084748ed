from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError, ValidationError

logger = logging.getLogger(__name__)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON body")
    return data


def register_error_handlers(app: Flask) -> None:
    """Every error leaves the API as ``{"message": ...}`` with a matching status."""

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"message": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"message": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": str(e) or e.__class__.__name__}), 500

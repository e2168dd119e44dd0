"""
Error taxonomy for the JSON API.

Handlers and services raise these; `register_error_handlers` turns them into
`{"message": ...}` responses. Anything else that escapes a handler is logged
and rendered as a generic 500 so no internals reach the client.
"""
from __future__ import annotations

from flask import Flask, g, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException


class ShopError(Exception):
    status_code = 500
    message = "internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(ShopError):
    status_code = 400
    message = "invalid request"


class ConflictError(ShopError):
    status_code = 400
    message = "conflicting record"


class AuthError(ShopError):
    status_code = 401
    message = "authentication required"


class MissingToken(AuthError):
    message = "token not provided"


class WrongPassword(AuthError):
    message = "wrong password"


class ForbiddenError(ShopError):
    status_code = 403
    message = "access denied, admin only"


class NotFoundError(ShopError):
    status_code = 404
    message = "not found"


class UnknownEmail(NotFoundError):
    message = "email not registered"


class InternalError(ShopError):
    pass


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ShopError)
    def _shop_error(e: ShopError):
        if e.status_code >= 500:
            app.logger.error("Request failed (request_id=%s): %s", getattr(g, "request_id", None), e)
        return jsonify({"message": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        # Routing-level errors (unknown URL, wrong method, oversized body) stay JSON too.
        return jsonify({"message": (e.name or "error").lower()}), e.code or 500

    @app.errorhandler(SQLAlchemyError)
    def _db_error(e: SQLAlchemyError):
        app.logger.exception("Database error (request_id=%s)", getattr(g, "request_id", None))
        return jsonify({"message": InternalError.message}), 500

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return jsonify({"message": InternalError.message}), 500

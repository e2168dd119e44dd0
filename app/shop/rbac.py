from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import current_app, g, request

from app.shop.errors import ForbiddenError, MissingToken
from app.shop.security import Claims, decode_access_token

BEARER_PREFIX = "Bearer "


def bearer_token(header: str | None) -> str:
    """Return the token after `Bearer `, or raise MissingToken."""
    if not header or not header.startswith(BEARER_PREFIX):
        raise MissingToken()
    return header[len(BEARER_PREFIX):].strip()


def load_claims() -> Claims:
    """
    Verify the request's bearer token and attach the decoded claims to `g.claims`.
    Token errors propagate as 401s (expired vs invalid are distinct messages).
    """
    token = bearer_token(request.headers.get("Authorization"))
    claims = decode_access_token(token=token, secret=current_app.config["JWT_SECRET"])
    g.claims = claims
    return claims


def current_claims() -> Claims | None:
    return getattr(g, "claims", None)


def require_auth(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        load_claims()
        return fn(*args, **kwargs)

    return wrapped


def require_admin(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Role gate. Stack under `require_auth` so claims are already loaded."""

    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        claims = current_claims()
        if claims is None or claims.role != "admin":
            current_app.logger.warning(
                "Forbidden: admin route %s (role=%s request_id=%s)",
                request.path,
                claims.role if claims else None,
                getattr(g, "request_id", None),
            )
            raise ForbiddenError()
        return fn(*args, **kwargs)

    return wrapped

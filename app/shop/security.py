"""
Password hashing and session tokens.

Tokens are HS256 JWTs signed with the server-held `JWT_SECRET`. Verification
reports three distinguishable failures so callers can tell a tampered token
from an expired one.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from app.shop.errors import AuthError

_JWT_ALG = "HS256"
_REQUIRED_CLAIMS = ("sub", "role", "iat", "exp")
ROLES = ("admin", "user")


class TokenError(AuthError):
    message = "invalid token"


class TokenMalformed(TokenError):
    pass


class TokenInvalidSignature(TokenError):
    pass


class TokenExpired(TokenError):
    message = "token expired"


@dataclass(frozen=True)
class Claims:
    id: int
    email: str
    name: str
    role: str
    issued_at: datetime
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time check; False for a wrong password, never an exception."""
    if not password or not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # Stored value is not a werkzeug hash string.
        return False


def create_access_token(
    *,
    secret: str,
    user_id: int,
    email: str,
    name: str,
    role: str,
    expires_days: int = 7,
    now: datetime | None = None,
) -> str:
    if not secret:
        raise ValueError("jwt_secret_blank")
    if role not in ROLES:
        raise ValueError("invalid_role")

    issued = now or datetime.now(timezone.utc)
    exp = issued + timedelta(days=max(1, int(expires_days)))

    payload: dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "name": name,
        "role": role,
        "iat": int(issued.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def decode_access_token(*, token: str, secret: str) -> Claims:
    """
    Verify structure, then signature, then expiry.

    Raises TokenMalformed, TokenInvalidSignature or TokenExpired.
    """
    if not secret:
        raise ValueError("jwt_secret_blank")
    if not token:
        raise TokenMalformed()
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[_JWT_ALG],
            options={"require": list(_REQUIRED_CLAIMS)},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    # InvalidSignatureError subclasses DecodeError, so it must be caught first.
    except jwt.InvalidSignatureError:
        raise TokenInvalidSignature()
    except jwt.InvalidTokenError:
        raise TokenMalformed()

    role = payload.get("role")
    if role not in ROLES:
        raise TokenMalformed()
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise TokenMalformed()

    return Claims(
        id=user_id,
        email=str(payload.get("email") or ""),
        name=str(payload.get("name") or ""),
        role=role,
        issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
        expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
    )

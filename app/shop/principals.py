from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError

from app.shop.errors import ConflictError, UnknownEmail, ValidationError, WrongPassword
from app.shop.models import Admin, User
from app.shop.security import create_access_token, hash_password, verify_password

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

P = TypeVar("P", Admin, User)


@dataclass(frozen=True)
class LoginResult:
    token: str
    principal: Admin | User

    def to_dict(self) -> dict[str, Any]:
        return {"token": self.token, "user": self.principal.to_public(with_role=True)}


def normalize_email(email: str | None) -> str:
    """Emails are stored and looked up trimmed and lowercased."""
    return (email or "").strip().lower()


def find_by_email(s: "Session", model: type[P], email: str) -> P | None:
    e = normalize_email(email)
    if not e:
        return None
    return s.query(model).filter(model.email == e).one_or_none()


def find_by_id(s: "Session", model: type[P], principal_id: int) -> P | None:
    return s.get(model, int(principal_id))


def email_in_use(s: "Session", email: str) -> bool:
    return find_by_email(s, User, email) is not None


def authenticate(
    s: "Session",
    *,
    email: str | None,
    password: str | None,
    secret: str,
    expires_days: int = 7,
) -> LoginResult:
    """
    Check credentials and issue a token.

    The admin table is consulted first: an email present in both tables logs in as admin.
    """
    e = normalize_email(email)
    if not e or not password:
        raise ValidationError("email and password are required")

    principal: Admin | User | None = find_by_email(s, Admin, e)
    if principal is None:
        principal = find_by_email(s, User, e)
    if principal is None:
        raise UnknownEmail()

    if not verify_password(password, principal.password_hash):
        logger.info("Login failed: wrong password (role=%s id=%s)", principal.role, principal.id)
        raise WrongPassword()

    token = create_access_token(
        secret=secret,
        user_id=principal.id,
        email=principal.email,
        name=principal.name,
        role=principal.role,
        expires_days=expires_days,
    )
    return LoginResult(token=token, principal=principal)


def validate_registration(payload: dict) -> tuple[str, str, str]:
    name = (payload.get("name") or "").strip() if isinstance(payload.get("name"), str) else ""
    email = normalize_email(payload.get("email")) if isinstance(payload.get("email"), str) else ""
    password = payload.get("password") if isinstance(payload.get("password"), str) else ""
    if not name or not email or not password:
        raise ValidationError("name, email and password are required")
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("invalid email")
    return name, email, password


def create_user(s: "Session", *, name: str, email: str, password: str) -> User:
    """Insert a user. Duplicate email surfaces as ConflictError with the session rolled back."""
    user = User(name=name, email=email, password_hash=hash_password(password))
    s.add(user)
    try:
        s.flush()
    except IntegrityError:
        s.rollback()
        raise ConflictError("email already registered")
    return user


def register_user(s: "Session", payload: dict) -> User:
    name, email, password = validate_registration(payload)
    user = create_user(s, name=name, email=email, password=password)
    s.commit()
    logger.info("Registered user id=%s", user.id)
    return user

from __future__ import annotations

import uuid

from flask import Blueprint, current_app, g, jsonify, request

from app.shop.db import db_session
from app.shop.errors import ConflictError, NotFoundError, ValidationError
from app.shop.models import Admin, User
from app.shop.principals import authenticate, email_in_use, find_by_id, register_user
from app.shop.rbac import require_auth

bp = Blueprint("auth", __name__)


def assign_request_id() -> None:
    """Per-request id for log correlation."""
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")
    return payload


@bp.post("/cadastro")
def register():
    payload = json_body()
    s = db_session()
    try:
        user = register_user(s, payload)
    except ConflictError:
        current_app.logger.info("Registration rejected: email in use (request_id=%s)", g.request_id)
        raise
    body = user.to_public()
    body["createdAt"] = user.created_at.isoformat() if user.created_at else None
    return jsonify(body), 200


@bp.post("/login")
def login():
    payload = json_body()
    s = db_session()
    result = authenticate(
        s,
        email=payload.get("email") if isinstance(payload.get("email"), str) else None,
        password=payload.get("password") if isinstance(payload.get("password"), str) else None,
        secret=current_app.config["JWT_SECRET"],
        expires_days=int(current_app.config.get("JWT_EXPIRES_DAYS", 7)),
    )
    return jsonify(result.to_dict())


@bp.get("/user")
@require_auth
def current_user():
    claims = g.claims
    s = db_session()
    model = Admin if claims.is_admin else User
    principal = find_by_id(s, model, claims.id)
    if principal is None:
        raise NotFoundError("user not found")
    return jsonify(principal.to_public())


@bp.get("/check-email")
def check_email():
    email = (request.args.get("email") or "").strip()
    if not email:
        raise ValidationError("email query parameter is required")
    s = db_session()
    return jsonify({"exists": email_in_use(s, email)})

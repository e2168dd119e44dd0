"""
Admin-only catalog mutations. Every route needs a bearer token with role=admin.
"""
from __future__ import annotations

from flask import Blueprint, jsonify

from app.shop.auth import json_body
from app.shop.db import db_session
from app.shop.modules.catalog.service import (
    create_category,
    create_product,
    create_subcategory,
    delete_category,
    delete_product,
    delete_subcategory,
    update_category,
    update_product,
    update_subcategory,
)
from app.shop.rbac import require_admin, require_auth

bp = Blueprint("catalog_admin", __name__)


# ---------- Products ----------
@bp.post("/add_product")
@require_auth
@require_admin
def product_create():
    product = create_product(db_session(), json_body())
    return jsonify(product.to_dict()), 200


@bp.put("/product/<int:product_id>")
@require_auth
@require_admin
def product_update(product_id: int):
    product = update_product(db_session(), product_id, json_body())
    return jsonify(product.to_dict()), 200


@bp.delete("/product/<int:product_id>")
@require_auth
@require_admin
def product_delete(product_id: int):
    delete_product(db_session(), product_id)
    return "", 204


# ---------- Categories ----------
@bp.post("/category")
@require_auth
@require_admin
def category_create():
    category = create_category(db_session(), json_body())
    return jsonify(category.to_dict()), 201


@bp.put("/category/<int:category_id>")
@require_auth
@require_admin
def category_update(category_id: int):
    category = update_category(db_session(), category_id, json_body())
    return jsonify(category.to_dict()), 200


@bp.delete("/category/<int:category_id>")
@require_auth
@require_admin
def category_delete(category_id: int):
    delete_category(db_session(), category_id)
    return "", 204


# ---------- Subcategories ----------
@bp.post("/subcategory")
@require_auth
@require_admin
def subcategory_create():
    subcategory = create_subcategory(db_session(), json_body())
    return jsonify(subcategory.to_dict()), 200


@bp.put("/subcategory/<int:subcategory_id>")
@require_auth
@require_admin
def subcategory_update(subcategory_id: int):
    subcategory = update_subcategory(db_session(), subcategory_id, json_body())
    return jsonify(subcategory.to_dict()), 200


@bp.delete("/subcategory/<int:subcategory_id>")
@require_auth
@require_admin
def subcategory_delete(subcategory_id: int):
    delete_subcategory(db_session(), subcategory_id)
    return "", 204

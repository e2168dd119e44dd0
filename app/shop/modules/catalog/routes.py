from __future__ import annotations

from flask import Blueprint, jsonify

from app.shop.db import db_session
from app.shop.errors import NotFoundError
from app.shop.modules.catalog.service import (
    get_product,
    list_categories,
    list_products,
    list_subcategories,
    search_products,
)

bp = Blueprint("catalog", __name__)


@bp.get("/product")
def products_list():
    return jsonify([p.to_dict() for p in list_products(db_session())])


@bp.get("/product/<int:product_id>")
def product_detail(product_id: int):
    return jsonify(get_product(db_session(), product_id).to_dict())


@bp.get("/product/name/<name>")
def products_by_name(name: str):
    products = search_products(db_session(), name)
    if not products:
        raise NotFoundError("product not found")
    return jsonify([p.to_dict() for p in products])


@bp.get("/category")
def categories_list():
    return jsonify([c.to_dict() for c in list_categories(db_session())])


@bp.get("/subcategory")
def subcategories_list():
    return jsonify([sc.to_dict() for sc in list_subcategories(db_session())])

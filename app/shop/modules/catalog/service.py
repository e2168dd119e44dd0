from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import IntegrityError

from app.shop.errors import ConflictError, NotFoundError, ValidationError
from app.shop.models import utcnow
from app.shop.modules.catalog.models import Category, Product, SubCategory

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

PRODUCT_REQUIRED_FIELDS = ("name", "description", "price", "stock")


def _text(payload: dict, key: str) -> str:
    v = payload.get(key)
    return v.strip() if isinstance(v, str) else ""


def parse_price(raw: Any) -> Decimal:
    # bool is an int subclass; "price": true is not a price
    if isinstance(raw, bool) or raw is None:
        raise ValidationError("price must be a number")
    try:
        price = Decimal(str(raw))
    except InvalidOperation:
        raise ValidationError("price must be a number")
    if not price.is_finite() or price < 0:
        raise ValidationError("price must be a non-negative number")
    return price


def parse_stock(raw: Any) -> int:
    if isinstance(raw, bool) or raw is None:
        raise ValidationError("stock must be an integer")
    if isinstance(raw, float) and not raw.is_integer():
        raise ValidationError("stock must be an integer")
    try:
        stock = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("stock must be an integer")
    if stock < 0:
        raise ValidationError("stock must be a non-negative integer")
    return stock


def parse_ref_id(raw: Any, field: str) -> int | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be an integer id")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer id")


def _flush_or_conflict(s: "Session", message: str) -> None:
    try:
        s.flush()
    except IntegrityError:
        s.rollback()
        raise ConflictError(message)


# ---------- Categories ----------
def list_categories(s: "Session") -> list[Category]:
    return s.query(Category).order_by(Category.id.asc()).all()


def get_category(s: "Session", category_id: int) -> Category:
    c = s.get(Category, category_id)
    if c is None:
        raise NotFoundError("category not found")
    return c


def create_category(s: "Session", payload: dict) -> Category:
    name = _text(payload, "name")
    if not name:
        raise ValidationError("category name is required")
    c = Category(name=name)
    s.add(c)
    _flush_or_conflict(s, "category already exists")
    s.commit()
    logger.info("Created category id=%s", c.id)
    return c


def update_category(s: "Session", category_id: int, payload: dict) -> Category:
    c = get_category(s, category_id)
    name = _text(payload, "name")
    if not name:
        raise ValidationError("category name is required")
    c.name = name
    _flush_or_conflict(s, "category already exists")
    s.commit()
    return c


def delete_category(s: "Session", category_id: int) -> None:
    c = get_category(s, category_id)
    in_use = (
        s.query(SubCategory.id).filter(SubCategory.category_id == c.id).first() is not None
        or s.query(Product.id).filter(Product.category_id == c.id).first() is not None
    )
    if in_use:
        raise ConflictError("category is still referenced by subcategories or products")
    s.delete(c)
    s.commit()
    logger.info("Deleted category id=%s", category_id)


# ---------- Subcategories ----------
def list_subcategories(s: "Session") -> list[SubCategory]:
    return s.query(SubCategory).order_by(SubCategory.id.asc()).all()


def get_subcategory(s: "Session", subcategory_id: int) -> SubCategory:
    sc = s.get(SubCategory, subcategory_id)
    if sc is None:
        raise NotFoundError("subcategory not found")
    return sc


def _require_category(s: "Session", category_id: int | None, field: str = "categoryId") -> None:
    if category_id is not None and s.get(Category, category_id) is None:
        raise ValidationError(f"{field} does not reference an existing category")


def create_subcategory(s: "Session", payload: dict) -> SubCategory:
    name = _text(payload, "name")
    category_id = parse_ref_id(payload.get("categoryId"), "categoryId")
    if not name or category_id is None:
        raise ValidationError("subcategory name and categoryId are required")
    _require_category(s, category_id)
    sc = SubCategory(name=name, category_id=category_id)
    s.add(sc)
    _flush_or_conflict(s, "subcategory already exists")
    s.commit()
    logger.info("Created subcategory id=%s category_id=%s", sc.id, category_id)
    return sc


def update_subcategory(s: "Session", subcategory_id: int, payload: dict) -> SubCategory:
    sc = get_subcategory(s, subcategory_id)
    if "name" in payload:
        name = _text(payload, "name")
        if not name:
            raise ValidationError("subcategory name cannot be blank")
        sc.name = name
    if "categoryId" in payload:
        category_id = parse_ref_id(payload.get("categoryId"), "categoryId")
        if category_id is None:
            raise ValidationError("categoryId cannot be blank")
        _require_category(s, category_id)
        if category_id != sc.category_id:
            stranded = (
                s.query(Product.id)
                .filter(Product.sub_category_id == sc.id, Product.category_id != category_id)
                .first()
            )
            if stranded is not None:
                raise ConflictError("subcategory is still referenced by products of its current category")
        sc.category_id = category_id
    _flush_or_conflict(s, "subcategory already exists")
    s.commit()
    return sc


def delete_subcategory(s: "Session", subcategory_id: int) -> None:
    sc = get_subcategory(s, subcategory_id)
    if s.query(Product.id).filter(Product.sub_category_id == sc.id).first() is not None:
        raise ConflictError("subcategory is still referenced by products")
    s.delete(sc)
    s.commit()
    logger.info("Deleted subcategory id=%s", subcategory_id)


# ---------- Products ----------
def list_products(s: "Session") -> list[Product]:
    return s.query(Product).order_by(Product.id.asc()).all()


def _like_escape(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_products(s: "Session", name: str) -> list[Product]:
    """
    Case-insensitive substring match on product name.
    `%` and `_` in the term match literally; a blank term matches nothing.
    """
    term = name.strip()
    if not term:
        return []
    like = f"%{_like_escape(term)}%"
    return s.query(Product).filter(Product.name.ilike(like, escape="\\")).order_by(Product.name.asc()).all()


def get_product(s: "Session", product_id: int) -> Product:
    p = s.get(Product, product_id)
    if p is None:
        raise NotFoundError("product not found")
    return p


def _apply_refs(s: "Session", product: Product, payload: dict) -> None:
    if "categoryId" in payload:
        category_id = parse_ref_id(payload.get("categoryId"), "categoryId")
        _require_category(s, category_id)
        product.category_id = category_id
    if "subCategoryId" in payload:
        sub_id = parse_ref_id(payload.get("subCategoryId"), "subCategoryId")
        if sub_id is not None and s.get(SubCategory, sub_id) is None:
            raise ValidationError("subCategoryId does not reference an existing subcategory")
        product.sub_category_id = sub_id

    # A subcategory pins the product's category.
    if product.sub_category_id is not None:
        sc = s.get(SubCategory, product.sub_category_id)
        if product.category_id is None:
            product.category_id = sc.category_id
        elif product.category_id != sc.category_id:
            raise ValidationError("subCategoryId does not belong to categoryId")


def validate_product_payload(payload: dict) -> list[str]:
    """Returns the required fields that are missing (text fields must be non-blank strings)."""
    missing = []
    for key in PRODUCT_REQUIRED_FIELDS:
        v = payload.get(key)
        if key in ("name", "description"):
            if not isinstance(v, str) or not v.strip():
                missing.append(key)
        elif v is None or (isinstance(v, str) and not v.strip()):
            missing.append(key)
    return missing


def create_product(s: "Session", payload: dict) -> Product:
    missing = validate_product_payload(payload)
    if missing:
        raise ValidationError(f"missing field(s): {', '.join(missing)}")

    now = utcnow()
    product = Product(
        name=_text(payload, "name"),
        description=_text(payload, "description"),
        price=parse_price(payload.get("price")),
        stock=parse_stock(payload.get("stock")),
        created_at=now,
        updated_at=now,
    )
    _apply_refs(s, product, payload)
    s.add(product)
    _flush_or_conflict(s, "product already exists")
    s.commit()
    logger.info("Created product id=%s", product.id)
    return product


def update_product(s: "Session", product_id: int, payload: dict) -> Product:
    """Partial update: only keys present in the payload are touched."""
    product = get_product(s, product_id)

    for key in ("name", "description"):
        if key in payload:
            v = _text(payload, key)
            if not v:
                raise ValidationError(f"{key} cannot be blank")
            setattr(product, key, v)
    if "price" in payload:
        product.price = parse_price(payload.get("price"))
    if "stock" in payload:
        product.stock = parse_stock(payload.get("stock"))
    _apply_refs(s, product, payload)

    product.updated_at = utcnow()
    _flush_or_conflict(s, "product already exists")
    s.commit()
    return product


def delete_product(s: "Session", product_id: int) -> None:
    product = get_product(s, product_id)
    s.delete(product)
    s.commit()
    logger.info("Deleted product id=%s", product_id)

"""
Create tables and seed the admin account plus a starter catalog (idempotent).

Does NOT overwrite an existing admin's password.

Usage:
  python scripts/init_db.py
"""

from __future__ import annotations

import os
import sys
from decimal import Decimal
from pathlib import Path

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy.orm import Session  # noqa: E402

from app.shop.config import load_settings  # noqa: E402
from app.shop.models import Admin, Base, Category, Product, SubCategory  # noqa: E402
from app.shop.principals import find_by_email, normalize_email  # noqa: E402
from app.shop.security import hash_password  # noqa: E402
from scripts._db_utils import create_script_engine, script_session  # noqa: E402

SEED_CATEGORIES = ("Electronics", "Furniture")
SEED_SUBCATEGORIES = (
    ("Smartphones", "Electronics"),
    ("Tables", "Furniture"),
)
SEED_PRODUCTS = (
    {
        "name": "Smartphone X",
        "description": "Flagship smartphone",
        "price": Decimal("3500"),
        "stock": 10,
        "category": "Electronics",
        "subcategory": "Smartphones",
    },
    {
        "name": "Dining Table",
        "description": "Table for 6 people",
        "price": Decimal("1200"),
        "stock": 5,
        "category": "Furniture",
        "subcategory": "Tables",
    },
)


def ensure_admin(s: Session, *, name: str, email: str, password: str) -> Admin:
    email = normalize_email(email)
    admin = find_by_email(s, Admin, email)
    if not admin:
        admin = Admin(name=name, email=email, password_hash=hash_password(password))
        s.add(admin)
        s.flush()
    return admin


def ensure_catalog(s: Session) -> None:
    categories: dict[str, Category] = {}
    for name in SEED_CATEGORIES:
        c = s.query(Category).filter(Category.name == name).one_or_none()
        if not c:
            c = Category(name=name)
            s.add(c)
            s.flush()
        categories[name] = c

    subcategories: dict[str, SubCategory] = {}
    for name, category_name in SEED_SUBCATEGORIES:
        sc = s.query(SubCategory).filter(SubCategory.name == name).one_or_none()
        if not sc:
            sc = SubCategory(name=name, category_id=categories[category_name].id)
            s.add(sc)
            s.flush()
        subcategories[name] = sc

    for item in SEED_PRODUCTS:
        if s.query(Product).filter(Product.name == item["name"]).one_or_none():
            continue
        s.add(
            Product(
                name=item["name"],
                description=item["description"],
                price=item["price"],
                stock=item["stock"],
                category_id=categories[item["category"]].id,
                sub_category_id=subcategories[item["subcategory"]].id,
            )
        )


def seed_only(*, database_url: str | None = None) -> None:
    settings = load_settings()
    db_url = (database_url or settings.database_url).strip()

    engine = create_script_engine(db_url)
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()

    with script_session(db_url) as s:
        ensure_admin(
            s,
            name=settings.admin_name,
            email=settings.admin_email,
            password=settings.admin_password,
        )
        ensure_catalog(s)

    print("Initialized database (seed_only).")
    print(f"Admin email: {normalize_email(settings.admin_email)}")
    print("Admin password: (from ADMIN_PASSWORD)")


def main() -> None:
    seed_only(database_url=os.environ.get("DATABASE_URL"))


if __name__ == "__main__":
    main()

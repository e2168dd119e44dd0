"""Tests for the seed script."""
from app.shop import create_app
from app.shop.db import session_scope
from app.shop.models import Admin, Category, Product, SubCategory
from app.shop.security import verify_password
from scripts.init_db import seed_only


def test_seed_is_idempotent_and_keeps_admin_password(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path/'seed.db'}"
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("ADMIN_EMAIL", "Boss@Shop.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "first-pw")

    seed_only(database_url=db_url)
    monkeypatch.setenv("ADMIN_PASSWORD", "second-pw")
    seed_only(database_url=db_url)

    app = create_app()
    with session_scope(app) as s:
        admins = s.query(Admin).all()
        assert len(admins) == 1
        assert admins[0].email == "boss@shop.com"
        assert verify_password("first-pw", admins[0].password_hash)
        assert s.query(Category).count() == 2
        assert s.query(SubCategory).count() == 2
        assert s.query(Product).count() == 2


def test_seeded_admin_logs_in_with_configured_email_casing(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path/'seed.db'}"
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("ADMIN_EMAIL", "Boss@Shop.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "pw")

    seed_only(database_url=db_url)

    client = create_app().test_client()
    r = client.post("/login", json={"email": "Boss@Shop.com", "password": "pw"})
    assert r.status_code == 200
    assert r.json["user"]["role"] == "admin"
    assert r.json["user"]["email"] == "boss@shop.com"


def test_seeded_timestamps_are_set(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path/'seed.db'}"
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("ENV", "test")

    seed_only(database_url=db_url)

    app = create_app()
    with session_scope(app) as s:
        product = s.query(Product).filter(Product.name == "Smartphone X").one()
        assert product.created_at is not None
        assert product.updated_at is not None
        assert s.query(Admin).one().created_at is not None


def test_seeded_admin_can_log_in_and_create_category(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path/'seed.db'}"
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("ADMIN_EMAIL", "admin@shop.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "pw")

    seed_only(database_url=db_url)

    client = create_app().test_client()
    r = client.post("/login", json={"email": "admin@shop.com", "password": "pw"})
    assert r.status_code == 200
    assert r.json["user"]["role"] == "admin"

    token = r.json["token"]
    r = client.post("/category", json={"name": "Books"}, headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 201
    assert len(client.get("/product").json) == 2

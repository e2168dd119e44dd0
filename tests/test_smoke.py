import pytest
from sqlalchemy.exc import IntegrityError

from app.shop import create_app
from app.shop.db import db_session, session_scope
from app.shop.models import Base, Category, SubCategory


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")

    app = create_app()

    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    return app.test_client()


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True


def test_healthz_ok(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.data == b"ok"


def test_unknown_route_is_json_404(client):
    r = client.get("/does-not-exist")
    assert r.status_code == 404
    assert "message" in r.json


def test_non_json_body_rejected(client):
    r = client.post("/login", data="not json", content_type="text/plain")
    assert r.status_code == 400
    assert "message" in r.json


def test_production_requires_real_secret(tmp_path, monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@localhost/shop")
    monkeypatch.setenv("JWT_SECRET", "change-me")
    with pytest.raises(RuntimeError):
        create_app()


def test_production_rejects_sqlite(tmp_path, monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'prod.db'}")
    monkeypatch.setenv("JWT_SECRET", "a-real-secret")
    with pytest.raises(RuntimeError):
        create_app()


def test_request_session_is_reused_within_a_context(client):
    app = client.application
    with app.app_context():
        first = db_session()
        assert db_session() is first
    with app.app_context():
        assert db_session() is not first


def test_session_scope_rolls_back_on_error(client):
    app = client.application
    with pytest.raises(RuntimeError):
        with session_scope(app) as s:
            s.add(Category(name="Ghost"))
            s.flush()
            raise RuntimeError("boom")

    with session_scope(app) as s:
        assert s.query(Category).filter(Category.name == "Ghost").count() == 0


def test_sqlite_enforces_foreign_keys(client):
    with pytest.raises(IntegrityError):
        with session_scope(client.application) as s:
            s.add(SubCategory(name="Orphan", category_id=9999))

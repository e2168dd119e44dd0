from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Iterator

from flask import Flask, current_app, g
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

_SESSION_KEY = "shop_session"


def _sqlite_foreign_keys(dbapi_connection, _record) -> None:
    # SQLite ignores FOREIGN KEY clauses unless asked per connection.
    dbapi_connection.execute("PRAGMA foreign_keys=ON")


def _make_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        engine = create_engine(url)
        event.listen(engine, "connect", _sqlite_foreign_keys)
        return engine
    return create_engine(url, pool_pre_ping=True, pool_recycle=1800)


def init_db(app: Flask) -> None:
    engine = _make_engine(app.config["DATABASE_URL"])
    app.extensions["sqlalchemy_engine"] = engine
    app.extensions["sqlalchemy_sessionmaker"] = sessionmaker(engine, autoflush=False, expire_on_commit=False)


def db_session() -> Session:
    """Session bound to the current request, opened on first use."""
    s = g.get(_SESSION_KEY)
    if s is None:
        s = current_app.extensions["sqlalchemy_sessionmaker"]()
        setattr(g, _SESSION_KEY, s)
    return s


def teardown_db_session(_exc: BaseException | None) -> None:
    s = g.pop(_SESSION_KEY, None)
    if s is not None:
        s.close()


@contextmanager
def session_scope(app: Flask) -> Iterator[Session]:
    """Unit of work outside a request: commit on success, roll back on error."""
    with app.extensions["sqlalchemy_sessionmaker"].begin() as s:
        yield s

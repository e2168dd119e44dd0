import logging

from flask import Flask, g, request
from dotenv import load_dotenv

from app.shop.auth import assign_request_id, bp as auth_bp
from app.shop.config import load_config
from app.shop.db import init_db, teardown_db_session
from app.shop.errors import register_error_handlers
from app.shop.modules.catalog.admin import bp as catalog_admin_bp
from app.shop.modules.catalog.routes import bp as catalog_bp
from app.shop.routes import bp as routes_bp


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.json.sort_keys = False

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("JWT_SECRET") or str(app.config["JWT_SECRET"]) in ("", "change-me"):
            raise RuntimeError("JWT_SECRET must be set to a strong value in production (not default).")
    elif app.config.get("JWT_SECRET") == "change-me":
        app.logger.warning("JWT_SECRET is the development default; set it before deploying.")

    init_db(app)

    register_error_handlers(app)

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(catalog_admin_bp)

    app.before_request(assign_request_id)
    app.teardown_appcontext(teardown_db_session)

    @app.after_request
    def _log_errors(response):  # type: ignore[no-redef]
        if response.status_code >= 400:
            app.logger.info(
                "%s %s -> %s (request_id=%s)",
                request.method,
                request.path,
                response.status_code,
                getattr(g, "request_id", None),
            )
        return response

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app

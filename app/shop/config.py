import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    env: str
    database_url: str
    log_level: str

    jwt_secret: str
    jwt_expires_days: int

    admin_name: str
    admin_email: str
    admin_password: str


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.")


def load_settings() -> Settings:
    return Settings(
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///shop.db"),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        jwt_secret=_getenv("JWT_SECRET", "change-me"),
        jwt_expires_days=_getenv_int("JWT_EXPIRES_DAYS", 7),
        admin_name=_getenv("ADMIN_NAME", "Admin Master"),
        admin_email=_getenv("ADMIN_EMAIL", "admin@example.com"),
        admin_password=os.environ.get("ADMIN_PASSWORD") or "change-me",
    )


def load_config() -> dict:
    s = load_settings()
    return {
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "LOG_LEVEL": s.log_level,
        "JWT_SECRET": s.jwt_secret,
        "JWT_EXPIRES_DAYS": s.jwt_expires_days,
        # JSON bodies only; nothing here accepts uploads
        "MAX_CONTENT_LENGTH": 1 * 1024 * 1024,
    }

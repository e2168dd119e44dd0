#!/usr/bin/env python3
"""
Production startup script.

1. Creates tables and seeds the admin/catalog (init_db.py)
2. Starts gunicorn (replaces this process via os.execvp)

Usage:
    python scripts/start.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def main() -> None:
    port = os.environ.get("PORT", "").strip()
    if not port:
        print("WARNING: PORT not set, using default 8080", flush=True)
        port = "8080"

    try:
        port_int = int(port)
        if port_int < 1 or port_int > 65535:
            raise ValueError("Port out of range")
    except ValueError:
        print(f"ERROR: Invalid PORT value '{port}'. Must be integer 1-65535.", flush=True)
        sys.exit(1)

    db_url = (os.environ.get("DATABASE_URL") or "").strip()
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and (not db_url or db_url.startswith("sqlite")):
        print("ERROR: Refusing to start on sqlite in production. Set DATABASE_URL to Postgres.", flush=True)
        sys.exit(1)

    print("=== Seeding database ===", flush=True)
    from scripts.init_db import seed_only

    try:
        seed_only(database_url=db_url or None)
    except Exception as e:
        print(f"Seed failed: {e}", flush=True)
        sys.exit(1)

    print(f"=== Starting gunicorn on 0.0.0.0:{port} ===", flush=True)

    # exec so gunicorn becomes PID 1 and receives signals directly
    os.execvp(
        "gunicorn",
        [
            "gunicorn",
            "app.wsgi:app",
            "--bind", f"0.0.0.0:{port}",
            "--workers", "2",
            "--timeout", "60",
            "--preload",
            "--access-logfile", "-",
            "--error-logfile", "-",
        ],
    )


if __name__ == "__main__":
    main()

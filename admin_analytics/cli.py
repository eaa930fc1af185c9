"""Small CLI helpers wired to console scripts for developer convenience.

Usage (from project root, after ``pip install -e .``):
  runserver --host=0.0.0.0 --port=8000 --no-reload
  run-tests
  migrate                    # defaults to `alembic upgrade head`
  init-env                   # copies .env.example -> .env if missing
  create-admin <username> [display name] [--email=<email>]
"""
from __future__ import annotations

import logging
import sys
import shutil
import subprocess
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def _args() -> List[str]:
    return sys.argv[1:]


def runserver() -> None:
    """Run Uvicorn programmatically. Accepts simple flags:

    --host=<host>  (default 127.0.0.1)
    --port=<port>  (default 8000)
    --no-reload    (disable auto-reload)
    --reload       (enable auto-reload)
    """
    import uvicorn

    host = "127.0.0.1"
    port = 8000
    reload = True

    for a in _args():
        if a.startswith("--host="):
            host = a.split("=", 1)[1]
        elif a.startswith("--port="):
            try:
                port = int(a.split("=", 1)[1])
            except ValueError:
                print(f"Ignoring invalid port: {a}")
        elif a == "--no-reload":
            reload = False
        elif a == "--reload":
            reload = True

    print(f"Starting uvicorn on {host}:{port} (reload={reload})")
    uvicorn.run("admin_analytics.main:app", host=host, port=port, reload=reload)


def run_tests() -> None:
    """Run pytest with any forwarded args."""
    cmd = ["pytest"] + _args()
    subprocess.run(cmd, check=True)


def run_migrations() -> None:
    """Run alembic. If no args provided, runs `alembic upgrade head`."""
    args = _args()
    if args:
        cmd = ["alembic"] + args
    else:
        cmd = ["alembic", "upgrade", "head"]
    subprocess.run(cmd, check=True)


def init_env() -> None:
    """Copy `.env.example` to `.env` if `.env` is missing."""
    root = Path(__file__).resolve().parents[1]
    src = root / ".env.example"
    dst = root / ".env"
    if dst.exists():
        print(f".env already exists at {dst}")
        return
    if not src.exists():
        print(f".env.example not found at {src}")
        return
    shutil.copy(src, dst)
    print(f"Created .env from .env.example at {dst}")


def create_admin() -> None:
    """Insert an admin row so sessions can be opened for it."""
    from admin_analytics.core.database import SessionLocal
    from admin_analytics.core.logger import setup_logging
    from admin_analytics.models.admin import Admin

    setup_logging()
    email = None
    positional = []
    for a in _args():
        if a.startswith("--email="):
            email = a.split("=", 1)[1]
        else:
            positional.append(a)
    if not positional:
        print("Usage: create-admin <username> [display name] [--email=<email>]")
        sys.exit(1)

    username = positional[0]
    display_name = " ".join(positional[1:]) or username
    db = SessionLocal()
    try:
        if db.query(Admin).filter(Admin.username == username).first():
            print(f"Admin {username!r} already exists")
            sys.exit(1)
        admin = Admin(username=username, display_name=display_name, email=email)
        db.add(admin)
        db.commit()
        logger.info(f"Created admin {admin.id} ({username})")
        print(f"Created admin {username!r} with id {admin.id}")
    finally:
        db.close()


if __name__ == "__main__":
    # Allow running the helpers directly: python -m admin_analytics.cli runserver
    if len(sys.argv) <= 1:
        print(__doc__)
        sys.exit(0)
    cmd = sys.argv[1]
    sys.argv.pop(1)
    if cmd == "runserver":
        runserver()
    elif cmd in ("run-tests", "tests", "test"):
        run_tests()
    elif cmd in ("migrate", "alembic"):
        run_migrations()
    elif cmd in ("init-env", "initenv"):
        init_env()
    elif cmd == "create-admin":
        create_admin()
    else:
        print(f"Unknown command: {cmd}")

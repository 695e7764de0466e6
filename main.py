#!/usr/bin/env python3
"""
Billboard marketplace -- command-line entry point.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080 --reload
  python main.py create-admin --username ops --email ops@example.com --first-name Ada --last-name Obi

Environment variables (see core/config.py):
  SECRET_KEY    JWT signing secret, at least 32 characters. Required unless DEBUG=true.
  DATABASE_URL  SQLAlchemy URL. Defaults to billboard.db next to this file.
"""

import argparse
import getpass
import sys

import uvicorn

from auth.models import Admin
from auth.store import AdminStore
from core.config import get_settings
from core.db import create_db_engine
from core.errors import AppError


def _serve(args: argparse.Namespace) -> int:
    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _create_admin(args: argparse.Namespace) -> int:
    """Create an administrator without going through the public signup route."""
    password = getpass.getpass("Password: ")
    if len(password) < 8:
        print("  [!] Password must be at least 8 characters.")
        return 1
    if getpass.getpass("Confirm password: ") != password:
        print("  [!] Passwords do not match.")
        return 1

    engine = create_db_engine(get_settings().database_url)
    try:
        admin = AdminStore(engine).create(
            Admin(
                first_name=args.first_name,
                last_name=args.last_name,
                username=args.username,
                email=args.email,
            ),
            password,
        )
    except AppError as e:
        print(f"  [!] {e.message}")
        return 1
    finally:
        engine.dispose()
    print(f"Administrator '{admin.username}' created (id={admin.id}).")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="billboard",
        description="Billboard marketplace REST backend.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve --reload
  python main.py create-admin --username ops --email ops@example.com --first-name Ada --last-name Obi
        """,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    serve.set_defaults(func=_serve)

    create = sub.add_parser("create-admin", help="Create an administrator account")
    create.add_argument("--username", required=True)
    create.add_argument("--email", required=True)
    create.add_argument("--first-name", required=True)
    create.add_argument("--last-name", required=True)
    create.set_defaults(func=_create_admin)

    args = parser.parse_args()
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()

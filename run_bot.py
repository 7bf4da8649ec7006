#!/usr/bin/env python3
"""
Start the sales order bot API under uvicorn.

Usage:
    # Default database and port
    python run_bot.py

    # Apply pending migrations, then serve another database on port 8001
    python run_bot.py --migrate --database-url sqlite:///./data/ventas.db -p 8001

    # Development: auto-reload and verbose logs
    python run_bot.py --reload --log-level debug
"""

import argparse
import os

LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the sales order bot API")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    parser.add_argument("--port", "-p", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument("--database-url", help="SQLAlchemy URL, overrides DATABASE_URL")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Overrides LOG_LEVEL")
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Run 'alembic upgrade head' before serving",
    )
    parser.add_argument("--reload", "-r", action="store_true", help="Auto-reload on code changes")
    return parser


def ensure_sqlite_dir(database_url: str) -> None:
    if database_url.startswith("sqlite:///./"):
        db_dir = os.path.dirname(database_url[len("sqlite:///./"):])
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)


def run_migrations() -> None:
    from alembic import command
    from alembic.config import Config

    command.upgrade(Config("alembic.ini"), "head")


def main():
    args = build_parser().parse_args()

    # sales_bot.config reads the environment at import time
    if args.database_url:
        os.environ["DATABASE_URL"] = args.database_url
    if args.log_level:
        os.environ["LOG_LEVEL"] = args.log_level.upper()

    database_url = os.getenv("DATABASE_URL", "sqlite:///./sales_bot.db")
    ensure_sqlite_dir(database_url)

    print(f"\n{'=' * 50}")
    print("Sales Order Bot")
    print(f"Listening: {args.host}:{args.port}")
    print(f"Database:  {database_url}")
    print(f"{'=' * 50}\n")

    if args.migrate:
        run_migrations()

    import uvicorn

    uvicorn.run(
        "sales_bot.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=(args.log_level or os.getenv("LOG_LEVEL", "info")).lower(),
    )


if __name__ == "__main__":
    main()

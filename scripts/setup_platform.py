#!/usr/bin/env python3
# scripts/setup_platform.py
"""
Platform setup: first SUPER_ADMIN outside of HTTP.

Same rule as POST /api/v1/auth/setup: it only succeeds while the users
table is empty, so running it again is a no-op.

Examples:
  # Create tables from the models (local/dev only, prefer alembic upgrade head)
  python -m scripts.setup_platform --create-tables

  # Bootstrap the super admin from args
  python -m scripts.setup_platform --bootstrap --email admin@hms.ng --password "Admin@12345"

  # Credentials read from env (SUPER_ADMIN_EMAIL / SUPER_ADMIN_PASSWORD)
  python -m scripts.setup_platform --bootstrap
"""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from hms.core.config import get_settings
from hms.core.database import Database
from hms.core.errors import Forbidden
from hms.schemas.auth import SetupRequest
from hms.services.auth_service import bootstrap_super_admin

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="HMS platform setup")
    p.add_argument("--create-tables", action="store_true", help="Create missing tables from the models")
    p.add_argument("--bootstrap", action="store_true", help="Create the first SUPER_ADMIN")

    # Optional CLI overrides (otherwise env is used)
    p.add_argument("--email", type=str, help="SUPER_ADMIN email (or env SUPER_ADMIN_EMAIL)")
    p.add_argument("--password", type=str, help="SUPER_ADMIN password (or env SUPER_ADMIN_PASSWORD)")
    p.add_argument("--first-name", type=str, default=None, help="Default: env SUPER_ADMIN_FIRST_NAME or 'Super'")
    p.add_argument("--last-name", type=str, default=None, help="Default: env SUPER_ADMIN_LAST_NAME or 'Admin'")
    return p.parse_args()


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args()

    if not args.create_tables and not args.bootstrap:
        print("Nothing to do. Use --create-tables and/or --bootstrap.")
        return 1

    settings = get_settings()
    database = Database(settings)
    try:
        if args.create_tables:
            database.create_all()
            print("Tables created")

        if args.bootstrap:
            try:
                payload = SetupRequest(
                    email=args.email or settings.super_admin_email,
                    password=args.password or settings.super_admin_password,
                    first_name=args.first_name or settings.super_admin_first_name,
                    last_name=args.last_name or settings.super_admin_last_name,
                )
            except ValidationError as exc:
                print(f"Invalid super admin details:\n{exc}")
                return 1

            try:
                with database.session() as db:
                    user = bootstrap_super_admin(db, payload)
                    email = user.email
            except Forbidden as exc:
                print(f"Skipped: {exc.detail}")
                return 0
            print(f"SUPER_ADMIN created: {email}")
    except Exception:
        logger.exception("Platform setup failed")
        raise
    finally:
        database.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())

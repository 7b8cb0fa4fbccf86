#!/usr/bin/env python3
"""
Create the first admin user.

Reads the admin's details from the environment and creates the database tables if needed.
Does nothing when an admin already exists or the email is already taken.

Usage:
  ADMIN_BOOTSTRAP_EMAIL=ops@example.com \\
  ADMIN_BOOTSTRAP_PASSWORD=change-me-please \\
  ADMIN_BOOTSTRAP_FIRST_NAME=Ada ADMIN_BOOTSTRAP_SURNAME=Lovelace \\
  python scripts/bootstrap_admin.py

DATABASE_URL selects the database (same variable as the API).
"""

import logging
import os
import sys

from bidtracker.database import SessionLocal, engine
from bidtracker.errors import UserValidationError
from bidtracker.models.base import Base
from bidtracker.models.enums import UserRole
from bidtracker.models.user import User
from bidtracker.services.user_service import create_user

REQUIRED_ENV = [
    "ADMIN_BOOTSTRAP_EMAIL",
    "ADMIN_BOOTSTRAP_PASSWORD",
    "ADMIN_BOOTSTRAP_FIRST_NAME",
    "ADMIN_BOOTSTRAP_SURNAME",
]

logger = logging.getLogger("bootstrap_admin")


def bootstrap_admin(db, email: str, password: str, first_name: str, surname: str) -> User | None:
    """Create the admin user, or return None when bootstrap should not run."""
    email = email.strip().lower()
    existing_admin = db.query(User).filter(User.role == UserRole.admin.value).first()
    if existing_admin:
        logger.info("An admin user already exists. Bootstrap aborted.")
        return None
    if db.query(User).filter(User.email == email).first():
        logger.info("User already exists. Bootstrap aborted.")
        return None
    return create_user(
        db,
        first_name=first_name,
        surname=surname,
        email=email,
        role=UserRole.admin.value,
        password=password,
    )


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
    if "--help" in sys.argv or "-h" in sys.argv:
        print(__doc__)
        sys.exit(0)

    missing = [key for key in REQUIRED_ENV if not os.getenv(key)]
    if missing:
        raise SystemExit(f"Missing env vars: {', '.join(missing)}")

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = bootstrap_admin(
            db,
            email=os.environ["ADMIN_BOOTSTRAP_EMAIL"],
            password=os.environ["ADMIN_BOOTSTRAP_PASSWORD"],
            first_name=os.environ["ADMIN_BOOTSTRAP_FIRST_NAME"],
            surname=os.environ["ADMIN_BOOTSTRAP_SURNAME"],
        )
    except UserValidationError as e:
        raise SystemExit(f"Failed to bootstrap admin user: {e}")
    finally:
        db.close()
    if user:
        logger.info("Admin user created for %s.", user.email)


if __name__ == "__main__":
    main()

"""Utility script to create a user and print a bearer token for it."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from studity.domain.entities import ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER, User
from studity.infrastructure.database import SessionLocal, initialize_database
from studity.infrastructure.repositories import UserRepository
from studity.infrastructure.security import create_user_token


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for user creation."""

    parser = argparse.ArgumentParser(
        description="Create a user for the Studity notification service.",
    )
    parser.add_argument("--name", default="Administrator", help="Full name of the user")
    parser.add_argument(
        "--email",
        default="admin@example.com",
        help="Email address notifications are sent to (default: admin@example.com)",
    )
    parser.add_argument(
        "--role",
        choices=[ROLE_STUDENT, ROLE_TEACHER, ROLE_ADMIN],
        default=ROLE_ADMIN,
        help="Role of the user (default: admin)",
    )
    return parser.parse_args()


def main() -> None:
    """Create a user using the provided command line arguments."""

    args = parse_args()
    initialize_database()

    session = SessionLocal()
    try:
        user = UserRepository(session).create(
            User(id=None, name=args.name, email=args.email, role=args.role)
        )
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not save the user: {exc}") from exc
    else:
        print(
            "User created:\n"
            f"  ID: {user.id}\n"
            f"  Name: {user.name}\n"
            f"  Email: {user.email}\n"
            f"  Role: {user.role}\n"
            f"  Token: {create_user_token(user.id)}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()

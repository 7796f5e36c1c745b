"""Create a user account from the command line.

Usage:
    python -m tetelek.create_user USERNAME EMAIL [--superuser]

The password is read from the TETELEK_PASSWORD environment variable or
prompted for interactively.
"""
import argparse
import getpass
import os
import sys

from tetelek.core.exceptions import DuplicateKeyError
from tetelek.database import Base, SessionLocal, engine, ensure_user_schema
from tetelek.models import user  # noqa: F401
from tetelek.services.credential_store import CredentialStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a tételek user account.")
    parser.add_argument("username")
    parser.add_argument("email")
    parser.add_argument("--superuser", action="store_true", help="grant delete rights")
    return parser


def read_password() -> str:
    password = os.getenv("TETELEK_PASSWORD")
    if password:
        return password
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Password (again): "):
        print("Passwords do not match.", file=sys.stderr)
        sys.exit(1)
    return password


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    password = read_password()

    Base.metadata.create_all(bind=engine)
    ensure_user_schema()

    db = SessionLocal()
    try:
        user_id = CredentialStore(db).create(args.username, password, args.email.strip().lower(), args.superuser)
    except DuplicateKeyError as exc:
        print(f"User already exists ({exc.field or 'username or email'} taken).", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()

    print(f"Created user {args.username} with id {user_id}")


if __name__ == "__main__":
    main()

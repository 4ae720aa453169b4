"""
Create an account from the command line (e.g. the first admin). Run from project root:
  python -m blog_api.scripts.create_user EMAIL PASSWORD [role] [--username NAME]
Example:
  python -m blog_api.scripts.create_user admin@example.com your-secure-password admin
"""
import argparse
import sys

from blog_api.core.config import get_settings
from blog_api.core.database import build_engine, build_session_factory
from blog_api.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from blog_api.schemas.auth import normalize_email
from blog_api.services.credentials import (
    DuplicateUserError,
    create_user,
    exists_by_email,
    generate_username,
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Blog API user.")
    parser.add_argument("email", help="Email address (max 50 chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    parser.add_argument("--username", help="Username (default: generated)")
    args = parser.parse_args(argv)

    try:
        email = normalize_email(args.email)
    except ValueError as e:
        print(f"Invalid email address: {e}", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1
    username = (args.username or generate_username()).strip()
    if not username or len(username) > 20:
        print("Invalid username length.", file=sys.stderr)
        return 1

    settings = get_settings()
    db = build_session_factory(build_engine(settings))()
    try:
        if exists_by_email(db, email):
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        try:
            user = create_user(
                db,
                username=username,
                email=email,
                password=args.password,
                role=args.role,
                rounds=settings.BCRYPT_ROUNDS,
            )
        except DuplicateUserError as e:
            print(e.message, file=sys.stderr)
            return 1
        print(f"Created user '{user.username}' <{user.email}> with role '{user.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

"""
Create an account (e.g. the first Admin). Run from project root:
  python -m taskmanager.scripts.create_user EMAIL PASSWORD FIRST_NAME LAST_NAME [role]
Example:
  python -m taskmanager.scripts.create_user admin@example.com your-secure-password Ada Admin Admin
"""
import argparse
import sys

from taskmanager.core.database import SessionLocal
from taskmanager.core.logging import configure_logging
from taskmanager.core.security import (
    EMAIL_MAX_LEN,
    EMAIL_MIN_LEN,
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)
from taskmanager.core.tokens import get_token_service
from taskmanager.models.user import Role
from taskmanager.repositories.users import SqlAlchemyAccountStore
from taskmanager.services.auth import AuthService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Task Manager account.")
    parser.add_argument("email", help=f"Email ({EMAIL_MIN_LEN}-{EMAIL_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("first_name", help=f"First name (1-{NAME_MAX_LEN} chars)")
    parser.add_argument("last_name", help=f"Last name (1-{NAME_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.USER.value,
        choices=[r.value for r in Role],
    )
    args = parser.parse_args(argv)
    configure_logging()

    email = args.email.strip()
    if not (EMAIL_MIN_LEN <= len(email) <= EMAIL_MAX_LEN) or "@" not in email:
        print("Invalid email.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1
    for name in (args.first_name, args.last_name):
        if not name.strip() or len(name) > NAME_MAX_LEN:
            print("Invalid name length.", file=sys.stderr)
            return 1

    db = SessionLocal()
    try:
        service = AuthService(SqlAlchemyAccountStore(db), get_token_service())
        result = service.register(
            first_name=args.first_name,
            last_name=args.last_name,
            email=email,
            password=args.password,
            role=args.role,
        )
        if not result.success:
            print(result.message, file=sys.stderr)
            return 1
        print(f"Created account '{result.user.email}' with role '{result.user.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

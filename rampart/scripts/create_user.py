"""
Create a user (e.g. first admin) or change an existing user's upload tier.
Run from project root:
  python -m rampart.scripts.create_user USERNAME PASSWORD [role]
  python -m rampart.scripts.create_user USERNAME --set-role analyst
Example:
  python -m rampart.scripts.create_user admin your-secure-password admin

Roles: admin (all formats, including SecurityScorecard), analyst (all other
formats), viewer (read-only).
"""
import argparse
import sys

from rampart.core.database import SessionLocal
from rampart.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    ROLE_VIEWER,
    ROLES,
    USERNAME_MAX_LEN,
    hash_password,
)
from rampart.models.user import User


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Rampart user or change a user's role (no registration UI).")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("password", nargs="?", help="Password (8-128 chars); omit with --set-role")
    parser.add_argument("role", nargs="?", default=ROLE_VIEWER, choices=list(ROLES))
    parser.add_argument("--set-role", choices=list(ROLES), help="Change the role of an existing user")
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.username == username).first()
        if args.set_role:
            if existing is None:
                print(f"User '{username}' does not exist.", file=sys.stderr)
                return 1
            previous = existing.role
            existing.role = args.set_role
            db.commit()
            print(f"Changed role of '{username}' from '{previous}' to '{args.set_role}'.")
            return 0

        if args.password is None or not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
            print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
            return 1
        if existing:
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        db.add(User(username=username, password_hash=hash_password(args.password), role=args.role))
        db.commit()
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

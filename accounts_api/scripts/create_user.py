"""
Create an account from the shell. Run from project root:
  python -m accounts_api.scripts.create_user USERNAME EMAIL FULLNAME PASSWORD
Example:
  python -m accounts_api.scripts.create_user alice01 alice@example.com "Alice Doe" your-secure-password
"""
import argparse
import logging
import sys

from accounts_api.core.config import get_settings
from accounts_api.core.database import SessionLocal
from accounts_api.core.errors import AppError
from accounts_api.services.credentials import create_user

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an account without going through /register.")
    parser.add_argument("username", help="Username (letters and digits)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("fullname", help="Full name")
    parser.add_argument("password", help="Password (8-72 bytes)")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        user = create_user(
            db,
            args.username,
            args.email,
            args.fullname,
            args.password,
            get_settings(),
        )
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user.username}' with id {user.id}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

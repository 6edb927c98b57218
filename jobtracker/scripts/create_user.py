"""
Create a user (e.g. first admin). Run from project root:
  python -m jobtracker.scripts.create_user EMAIL PASSWORD NAME [role]
Example:
  python -m jobtracker.scripts.create_user admin@example.com your-secure-password "Site Admin" ADMIN
"""
import argparse
import sys

from dotenv import load_dotenv

from jobtracker.core.config import get_settings
from jobtracker.core.database import build_engine, build_session_factory
from jobtracker.core.errors import ConflictError
from jobtracker.core.security import NAME_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from jobtracker.schemas.common import ROLE_VALUES
from jobtracker.services.users import register_user


def main() -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Create a job tracker user.")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("name", help=f"Display name (1-{NAME_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="WORKER", choices=sorted(ROLE_VALUES))
    args = parser.parse_args()

    email = args.email.strip()
    name = args.name.strip()
    if "@" not in email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not name or len(name) > NAME_MAX_LEN:
        print("Invalid name length.", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    engine = build_engine(get_settings())
    db = build_session_factory(engine)()
    try:
        user = register_user(db, email, args.password, name, role=args.role)
        print(f"Created user '{user.email}' with role '{user.role}'.")
        return 0
    except ConflictError as e:
        print(f"{e.message}: '{email}'.", file=sys.stderr)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())

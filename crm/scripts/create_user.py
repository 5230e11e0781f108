"""
Create a user from the command line (e.g. a second admin). Run from project root:
  python -m crm.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m crm.scripts.create_user alice a-secure-password viewer
"""
import argparse
import sys

from pydantic import ValidationError

from crm.core.config import get_settings
from crm.core.database import Database
from crm.core.exceptions import ConflictError
from crm.models.user import Role
from crm.schemas.user import UserCreate
from crm.services.users import UserService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a CRM user.")
    parser.add_argument("username", help="Username (3-255 chars)")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.VIEWER.value,
        choices=[role.value for role in Role],
    )
    args = parser.parse_args(argv)

    try:
        data = UserCreate(username=args.username.strip(), password=args.password, role=args.role)
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            print(f"{field}: {error['msg']}", file=sys.stderr)
        return 1

    db = Database.from_settings(get_settings())
    try:
        user = UserService(db).create_user(data)
    except ConflictError:
        print(f"User '{data.username}' already exists.", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user.username}' (id={user.id}) with role '{user.role.value}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

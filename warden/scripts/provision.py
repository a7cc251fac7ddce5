"""
Role provisioning from the command line. Run from project root:
  python -m warden.scripts.provision roles
  python -m warden.scripts.provision promote USER_ID
Use this to seed the baseline roles and bootstrap the first admin.
"""
import argparse
import logging
import sys

from warden.core.config import get_settings
from warden.core.database import SessionLocal
from warden.core.errors import NotFound
from warden.core.logging import configure_logging
from warden.services import RoleProvisioningService
from warden.stores import SqlRoleStore, SqlUserStore

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Provision Warden roles.")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("roles", help="Create USER, MODERATOR and ADMIN roles if missing")
    promote = sub.add_parser("promote", help="Grant ADMIN to an existing user")
    promote.add_argument("user_id", type=int, help="Numeric user id")
    args = parser.parse_args(argv)

    configure_logging(get_settings().LOG_LEVEL)

    db = SessionLocal()
    try:
        service = RoleProvisioningService(SqlUserStore(db), SqlRoleStore(db))
        if args.command == "roles":
            created = service.ensure_baseline_roles()
            print(f"Roles added to DB (created: {', '.join(created) or 'none'}).")
            return 0
        try:
            user = service.promote_to_admin(args.user_id)
        except NotFound as e:
            print(f"Not found: {e}", file=sys.stderr)
            return 1
        print(f"Admin role added to user '{user.username}' (id={user.id}).")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

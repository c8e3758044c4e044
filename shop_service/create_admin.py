"""Create an admin account from the command line."""
import argparse
import getpass
import logging
import sys

from shop_service.config import Settings
from shop_service.database import Database
from shop_service.logging_config import setup_logging
from shop_service.services.admin_service import AdminService

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create a shop admin account")
    parser.add_argument(
        "--username",
        type=str,
        required=True,
        help="Admin username (must be unique)"
    )
    parser.add_argument(
        "--password",
        type=str,
        default=None,
        help="Admin password (prompted for when omitted)"
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: $DATABASE_URL)"
    )
    args = parser.parse_args(argv)

    setup_logging()
    settings = Settings.from_env()
    password = args.password or getpass.getpass("Password: ")

    database = Database(args.database_url or settings.database_url)
    database.init_db()
    db = database.session()
    try:
        admin = AdminService().create_admin(db, args.username, password)
    except ValueError as e:
        logger.error(f"Could not create admin: {e}")
        return 1
    finally:
        db.close()
        database.close()

    print(f"Created admin {admin.username} ({admin.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())

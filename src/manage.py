"""FleetOps database management CLI.

Usage:
    python src/manage.py setup-db   # Create order, driver and proof tables
    python src/manage.py drop-db    # Drop them
"""

import argparse
import sys


def _domain():
    from fleetops.domain import fleetops

    fleetops.init()
    return fleetops


def setup_database():
    from fleetops.utils.db import setup_db

    print("Creating fleetops database schema...")
    setup_db(_domain())
    print("Done.")


def drop_database():
    from fleetops.utils.db import drop_db

    print("Dropping fleetops database schema...")
    drop_db(_domain())
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="FleetOps database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

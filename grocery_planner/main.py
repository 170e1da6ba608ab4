"""
Command-line entry point for the Grocery Planner.

Usage Examples:
    # Create tables and seed the default units
    grocery-planner init

    # Drop and recreate all tables
    grocery-planner reset --yes

    # Print a recipe with its ingredients, or a schedule with its groceries
    grocery-planner recipe 12
    grocery-planner schedule 3

    # Use another database than the configured one
    grocery-planner --database-url sqlite:///./groceries.db init
"""

import argparse
import json
import logging
import sys

from grocery_planner import __version__
from grocery_planner.services import database
from grocery_planner.services.exceptions import NotFoundError, ServiceError
from grocery_planner.services.grocery_service import load_schedule_composition
from grocery_planner.services.recipe_composition_service import load_recipe_composition
from grocery_planner.utils.config import get_config
from grocery_planner.utils.constants import APP_NAME


def init_cmd(new_database: bool = False) -> int:
    """Create tables and seed default units."""
    database.init_database()
    inserted = database.seed_units()
    if not database.verify_database():
        print("ERROR: tables missing after initialization")
        return 2
    state = "created" if new_database else "ready"
    print(f"Database {state} ({inserted} unit(s) seeded)")
    return 0


def reset_cmd(confirm: bool) -> int:
    """Drop and recreate all tables."""
    if not confirm:
        print("ERROR: reset deletes all data; pass --yes to confirm")
        return 1
    database.reset_database(confirm=True)
    database.seed_units()
    print("Database reset")
    return 0


def recipe_cmd(recipe_id: int) -> int:
    """Print a recipe composition as JSON."""
    composition = load_recipe_composition(recipe_id)
    print(json.dumps(composition.to_dict(), indent=2))
    return 0


def schedule_cmd(schedule_id: int) -> int:
    """Print a schedule composition as JSON."""
    composition = load_schedule_composition(schedule_id)
    print(json.dumps(composition.to_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grocery-planner",
        description=f"{APP_NAME} database utility",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy database URL (default: from configuration)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log service operations")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init", help="Create tables and seed default units")

    reset_parser = subparsers.add_parser("reset", help="Drop and recreate all tables")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm data deletion")

    recipe_parser = subparsers.add_parser("recipe", help="Show a recipe with its ingredients")
    recipe_parser.add_argument("recipe_id", type=int)

    schedule_parser = subparsers.add_parser(
        "schedule", help="Show a schedule with its grocery list"
    )
    schedule_parser.add_argument("schedule_id", type=int)

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(message)s")

    new_database = False
    if args.database_url:
        database.bind_engine(database.create_database_engine(args.database_url))
    else:
        config = get_config()
        config.ensure_directories()
        new_database = not config.database_exists()

    try:
        if args.command == "init":
            return init_cmd(new_database)
        elif args.command == "reset":
            return reset_cmd(args.yes)
        elif args.command == "recipe":
            return recipe_cmd(args.recipe_id)
        elif args.command == "schedule":
            return schedule_cmd(args.schedule_id)
        else:
            print(f"Unknown command: {args.command}")
            return 1
    except NotFoundError as e:
        print(f"ERROR: {e}")
        return 1
    except ServiceError as e:
        print(f"ERROR: {e}")
        return 2
    finally:
        database.close_connections()


if __name__ == "__main__":
    sys.exit(main())

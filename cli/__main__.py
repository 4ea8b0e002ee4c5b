#!/usr/bin/env python3
"""
Cattree CLI - Command-line interface for managing the service category tree.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    categories   Create, move, inspect and delete categories
    services     Manage services attached to categories
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli categories create "Documents" --parent-id 1
    python -m cli categories move 5 --parent-id 2
    python -m cli categories tree
    python -m cli categories stats --json
"""

import sys
import argparse
from cli import categories, migrate, service_records
from config import load_config
from errors import BackendUnavailable
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Cattree - Service category tree management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    categories.setup_parser(subparsers)
    service_records.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            # Commands that use services: categories, services
            # Commands that use db_manager directly: migrate
            if args.command in ("categories", "services"):
                args.func(args, Services(config))
            elif args.command == "migrate":
                args.func(args, DatabaseManager(config))
            else:
                args.func(args)
        except BackendUnavailable as e:
            print(f"Error: database unavailable: {e}")
            sys.exit(2)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

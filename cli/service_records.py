#!/usr/bin/env python3

import sys
from errors import ConstraintViolation
from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List the services attached to a category."""
    records = services.service_records.find_by_category_id(args.category_id)

    if not records:
        logger.info(f"No services found for category {args.category_id}.")
        return

    for record in records:
        logger.info(f"ID: {record.id}")
        logger.info(f"Title: {record.title}")
        if record.description:
            logger.info(f"Description: {record.description}")
        logger.info("-" * 80)

    logger.info(f"\nTotal services: {len(records)}")


def cmd_create(args, services):
    """Attach a new service to a category."""
    try:
        record = services.service_records.create(
            args.category_id, args.title, args.description or ""
        )
    except ConstraintViolation:
        logger.error(f"Category with ID {args.category_id} not found.")
        sys.exit(1)

    logger.info(f"✓ Service created successfully with ID: {record.id}")


def cmd_reassign(args, services):
    """Move all services of one category to another."""
    try:
        moved = services.service_records.reassign_category(
            args.from_category_id, args.to_category_id
        )
    except ConstraintViolation:
        logger.error(f"Category with ID {args.to_category_id} not found.")
        sys.exit(1)

    logger.info(f"✓ Moved {moved} service(s) to category {args.to_category_id}.")


def cmd_delete(args, services):
    """Delete a service by ID."""
    if services.service_records.delete(args.service_id):
        logger.info(f"✓ Service {args.service_id} deleted successfully.")
    else:
        logger.error(f"Service with ID {args.service_id} not found.")
        sys.exit(1)


def setup_parser(subparsers):
    """Setup services subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "services",
        help="Manage services attached to categories",
        description="List, create, reassign and delete services",
    )

    services_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available service commands",
        dest="subcommand",
        required=True,
    )

    list_parser = services_subparsers.add_parser(
        "list", help="List services of a category"
    )
    list_parser.add_argument("category_id", type=int, help="ID of the category")
    list_parser.set_defaults(func=cmd_list)

    create_parser = services_subparsers.add_parser("create", help="Create a service")
    create_parser.add_argument("category_id", type=int, help="ID of the category")
    create_parser.add_argument("title", help="Service title")
    create_parser.add_argument("--description", help="Service description")
    create_parser.set_defaults(func=cmd_create)

    reassign_parser = services_subparsers.add_parser(
        "reassign", help="Move all services of a category to another category"
    )
    reassign_parser.add_argument("from_category_id", type=int)
    reassign_parser.add_argument("to_category_id", type=int)
    reassign_parser.set_defaults(func=cmd_reassign)

    delete_parser = services_subparsers.add_parser("delete", help="Delete a service")
    delete_parser.add_argument("service_id", type=int, help="ID of the service")
    delete_parser.set_defaults(func=cmd_delete)

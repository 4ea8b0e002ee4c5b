#!/usr/bin/env python3

import sys
import json
from pathlib import Path
from errors import CategoryError
from models.category import UNSET
from logger import get_logger

logger = get_logger()


def _log_category(category, indent=""):
    logger.info(f"{indent}ID: {category.id}")
    logger.info(f"{indent}Name: {category.name}")
    if category.image:
        logger.info(f"{indent}Image: {category.image}")
    if category.parent_id:
        logger.info(f"{indent}Parent ID: {category.parent_id}")


def _fail(message):
    logger.error(message)
    sys.exit(1)


def cmd_list(args, services):
    """List all categories in the database."""
    categories = services.category_tree.list_all()

    if not categories:
        logger.info("No categories found.")
        return

    logger.info("\nCategories:")
    logger.info("=" * 80)
    for category in categories:
        logger.info(f"ID: {category.id}")
        logger.info(f"Name: {category.name}")
        if category.image:
            logger.info(f"Image: {category.image}")
        if category.parent_id:
            parent_name = category.parent.name if category.parent else "Unknown"
            logger.info(f"Parent: {parent_name} (ID: {category.parent_id})")
        logger.info("-" * 80)

    logger.info(f"\nTotal categories: {len(categories)}")


def cmd_roots(args, services):
    """List root categories."""
    roots = services.category_tree.list_roots()

    if not roots:
        logger.info("No categories found.")
        return

    for category in roots:
        logger.info(f"{category.id:>6}  {category.name}")


def cmd_tree(args, services):
    """Print the whole category tree."""
    forest = services.category_tree.get_tree()

    if args.json:
        print(json.dumps([node.to_dict() for node in forest], indent=2))
        return

    if not forest:
        logger.info("No categories found.")
        return

    for root in forest:
        for node, depth in root.walk():
            logger.info(f"{'  ' * depth}{node.name} (ID: {node.id})")


def cmd_show(args, services):
    """Show one category with its descendants and service records."""
    try:
        node = services.category_tree.get_with_children(args.category_id, args.depth)
    except CategoryError as e:
        _fail(f"Error: {e}")

    path = services.category_tree.get_path(node.id)
    if path:
        names = [ancestor.name for ancestor in path] + [node.name]
        logger.info(f"Path: {' / '.join(names)}")

    _log_category(node.category)

    records = services.service_records.find_by_category_id(node.id)
    logger.info(f"Services: {len(records)}")
    for record in records:
        logger.info(f"  - {record.title} (ID: {record.id})")

    if node.children:
        logger.info("Subtree:")
        for child in node.children:
            for descendant, depth in child.walk():
                logger.info(f"{'  ' * (depth + 1)}{descendant.name} (ID: {descendant.id})")


def cmd_create(args, services):
    """Create a new category."""
    image = None
    if args.image:
        try:
            image = services.images.store(Path(args.image))
        except FileNotFoundError as e:
            _fail(str(e))

    try:
        category = services.category_tree.create(
            args.name, parent_id=args.parent_id, image=image
        )
    except CategoryError as e:
        _fail(f"Error creating category: {e}")

    logger.info(f"\n✓ Category created successfully with ID: {category.id}")
    _log_category(category, indent="  ")


def cmd_update(args, services):
    """Update a category's name, image or parent."""
    name = args.name if args.name is not None else UNSET

    image = UNSET
    if args.clear_image:
        image = None
    elif args.image:
        try:
            image = services.images.store(Path(args.image))
        except FileNotFoundError as e:
            _fail(str(e))

    parent_id = UNSET
    if args.root:
        parent_id = None
    elif args.parent_id is not None:
        parent_id = args.parent_id

    try:
        category = services.category_tree.update(
            args.category_id, name=name, image=image, parent_id=parent_id
        )
    except CategoryError as e:
        _fail(f"Error updating category: {e}")

    logger.info("✓ Category updated successfully.")
    _log_category(category, indent="  ")


def cmd_move(args, services):
    """Move a category under another parent, or to the root level."""
    try:
        category = services.category_tree.move(args.category_id, args.parent_id)
    except CategoryError as e:
        _fail(f"Error moving category: {e}")

    target = f"parent ID {category.parent_id}" if category.parent_id else "root level"
    logger.info(f"✓ Category '{category.name}' moved to {target}.")


def cmd_delete(args, services):
    """Delete a category by ID."""
    try:
        category = services.category_tree.get(args.category_id)
    except CategoryError as e:
        _fail(f"Category with ID {args.category_id} not found: {e}")

    records = category.service_records

    logger.info("\nCategory to delete:")
    _log_category(category, indent="  ")
    if records:
        logger.info(f"  Services attached: {len(records)}")

    if not args.yes:
        confirm = (
            input("\nAre you sure you want to delete this category? (yes/no): ")
            .strip()
            .lower()
        )
        if confirm != "yes":
            logger.info("Deletion cancelled.")
            return

    if records and not args.with_services:
        _fail(
            "Category still has services. Re-run with --with-services "
            "to delete them too."
        )

    try:
        removed = services.category_tree.remove(
            category.id, delete_service_records=args.with_services
        )
    except CategoryError as e:
        _fail(f"Error deleting category: {e}")

    if removed:
        logger.info(f"Deleted {removed} service(s).")

    logger.info(f"✓ Category '{category.name}' deleted successfully.")


def cmd_stats(args, services):
    """Print category tree statistics."""
    stats = services.category_tree.get_statistics()

    if args.json:
        print(json.dumps(stats.to_dict(), indent=2))
        return

    logger.info("Category statistics:")
    logger.info(f"  Total categories:      {stats.total_count}")
    logger.info(f"  Root categories:       {stats.root_count}")
    logger.info(f"  Maximum depth:         {stats.max_depth}")
    logger.info(f"  Categories w/children: {stats.count_with_children}")


def seed_tree(services, categories_data, parent_id=None, counts=None):
    """Create categories from nested seed data, skipping existing ones.

    Args:
        services: Services container.
        categories_data: List of {"name", "image"?, "children"?} dicts.
        parent_id: Parent for this level, None for roots.
        counts: Running {"created", "skipped"} totals, updated in place.

    Returns:
        The counts dictionary.
    """
    if counts is None:
        counts = {"created": 0, "skipped": 0}

    for category_data in categories_data:
        name = (category_data.get("name") or "").strip()
        if not name:
            logger.warning("Skipping category with no name")
            continue

        existing = services.categories.find_by_name_in_group(name, parent_id)
        if existing:
            logger.info(f"⊘ Skipped '{name}' (already exists)")
            counts["skipped"] += 1
            category = existing
        else:
            try:
                category = services.category_tree.create(
                    name, parent_id=parent_id, image=category_data.get("image")
                )
            except CategoryError as e:
                logger.error(f"Error creating category '{name}': {e}")
                continue
            logger.info(f"✓ Created '{name}' (ID: {category.id})")
            counts["created"] += 1

        seed_tree(services, category_data.get("children", []), category.id, counts)

    return counts


def cmd_seed(args, services):
    """Seed categories from JSON file."""
    seed_file = Path(args.file) if args.file else (
        Path(__file__).parent.parent / "db" / "seed" / "categories.json"
    )

    if not seed_file.exists():
        _fail(f"Seed file not found: {seed_file}")

    try:
        with open(seed_file, "r") as f:
            categories_data = json.load(f)
    except json.JSONDecodeError as e:
        _fail(f"Error parsing JSON file: {e}")

    logger.info(f"\nSeeding categories from {seed_file}")
    logger.info("=" * 80)

    counts = seed_tree(services, categories_data)

    logger.info("=" * 80)
    logger.info("\nSeeding complete!")
    logger.info(f"Created: {counts['created']}")
    logger.info(f"Skipped: {counts['skipped']}")


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage service categories",
        description="Create, move, inspect and delete service categories",
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    list_parser = categories_subparsers.add_parser("list", help="List all categories")
    list_parser.set_defaults(func=cmd_list)

    roots_parser = categories_subparsers.add_parser(
        "roots", help="List categories without a parent"
    )
    roots_parser.set_defaults(func=cmd_roots)

    tree_parser = categories_subparsers.add_parser(
        "tree", help="Print the complete category tree"
    )
    tree_parser.add_argument("--json", action="store_true", help="Output JSON")
    tree_parser.set_defaults(func=cmd_tree)

    show_parser = categories_subparsers.add_parser(
        "show", help="Show a category with its children"
    )
    show_parser.add_argument("category_id", type=int, help="ID of the category")
    show_parser.add_argument(
        "--depth", type=int, default=None, help="Levels of children to load"
    )
    show_parser.set_defaults(func=cmd_show)

    create_parser = categories_subparsers.add_parser(
        "create", help="Create a new category"
    )
    create_parser.add_argument("name", help="Category name")
    create_parser.add_argument("--parent-id", type=int, help="Parent category ID")
    create_parser.add_argument("--image", help="Image file to upload")
    create_parser.set_defaults(func=cmd_create)

    update_parser = categories_subparsers.add_parser(
        "update", help="Update a category"
    )
    update_parser.add_argument("category_id", type=int, help="ID of the category")
    update_parser.add_argument("--name", help="New name")
    image_group = update_parser.add_mutually_exclusive_group()
    image_group.add_argument("--image", help="New image file to upload")
    image_group.add_argument(
        "--clear-image", action="store_true", help="Remove the image"
    )
    parent_group = update_parser.add_mutually_exclusive_group()
    parent_group.add_argument("--parent-id", type=int, help="New parent category ID")
    parent_group.add_argument(
        "--root", action="store_true", help="Detach from the parent"
    )
    update_parser.set_defaults(func=cmd_update)

    move_parser = categories_subparsers.add_parser(
        "move", help="Move a category to a different parent"
    )
    move_parser.add_argument("category_id", type=int, help="ID of the category")
    move_parser.add_argument(
        "--parent-id", type=int, default=None, help="New parent (omit for root)"
    )
    move_parser.set_defaults(func=cmd_move)

    delete_parser = categories_subparsers.add_parser(
        "delete", help="Delete a category by ID"
    )
    delete_parser.add_argument(
        "category_id",
        type=int,
        help="ID of the category to delete",
    )
    delete_parser.add_argument(
        "--with-services",
        action="store_true",
        help="Also delete the services attached to the category",
    )
    delete_parser.add_argument(
        "--yes", action="store_true", help="Do not ask for confirmation"
    )
    delete_parser.set_defaults(func=cmd_delete)

    stats_parser = categories_subparsers.add_parser(
        "stats", help="Show category tree statistics"
    )
    stats_parser.add_argument("--json", action="store_true", help="Output JSON")
    stats_parser.set_defaults(func=cmd_stats)

    seed_parser = categories_subparsers.add_parser(
        "seed", help="Seed categories from JSON file"
    )
    seed_parser.add_argument(
        "--file", help="Seed file (defaults to db/seed/categories.json)"
    )
    seed_parser.set_defaults(func=cmd_seed)

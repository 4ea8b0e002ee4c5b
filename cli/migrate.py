#!/usr/bin/env python3

from db.manager import transaction_scope
from logger import get_logger

logger = get_logger()


def init_schema_migrations_table(conn):
    conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
            migration_file TEXT PRIMARY KEY,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.commit()


def get_applied_migrations(conn):
    cursor = conn.execute(
        "SELECT migration_file FROM schema_migrations ORDER BY migration_file"
    )
    return {row[0] for row in cursor.fetchall()}


def get_available_migrations(migrations_dir):
    if not migrations_dir.exists():
        return []
    return sorted(path.name for path in migrations_dir.glob("*.sql"))


def get_pending_migrations(conn, migrations_dir):
    """Migration file names not yet recorded in schema_migrations, in order."""
    init_schema_migrations_table(conn)
    applied = get_applied_migrations(conn)
    return [m for m in get_available_migrations(migrations_dir) if m not in applied]


def apply_migration(conn, migration_file, migrations_dir):
    with open(migrations_dir / migration_file, "r") as f:
        sql = f.read()

    try:
        # executescript commits any open transaction before it runs
        conn.executescript(sql)
        with transaction_scope(conn):
            conn.execute(
                "INSERT INTO schema_migrations (migration_file) VALUES (?)",
                (migration_file,),
            )
        logger.info(f"Applied migration: {migration_file}")
    except Exception as e:
        logger.error(f"Error applying migration {migration_file}: {e}")
        raise


def apply_pending_migrations(conn, migrations_dir):
    """Apply every pending migration on an open connection.

    Returns:
        List of applied migration file names.
    """
    pending = get_pending_migrations(conn, migrations_dir)
    for migration in pending:
        apply_migration(conn, migration, migrations_dir)
    return pending


def cmd_status(args, db_manager):
    """Show migration status."""
    db_path = db_manager.get_db_path()

    if not db_path.exists():
        logger.info(
            "Database does not exist. Run 'python -m cli migrate apply' to create it."
        )
        return

    migrations_dir = db_manager.get_migrations_dir()
    with db_manager.connect() as conn:
        init_schema_migrations_table(conn)
        applied = get_applied_migrations(conn)
        available = get_available_migrations(migrations_dir)

        logger.info("Migration Status:")
        logger.info("================")

        if not available:
            logger.info("No migrations found.")
            return

        for migration in available:
            status_text = "APPLIED" if migration in applied else "PENDING"
            logger.info(f"{migration}: {status_text}")

        pending_count = len([m for m in available if m not in applied])
        logger.info(f"\nTotal migrations: {len(available)}")
        logger.info(f"Applied: {len(applied)}")
        logger.info(f"Pending: {pending_count}")


def cmd_apply(args, db_manager):
    """Apply pending migrations."""
    with db_manager.connect() as conn:
        applied = apply_pending_migrations(conn, db_manager.get_migrations_dir())

    if applied:
        logger.info(f"Successfully applied {len(applied)} migration(s).")
    else:
        logger.info("No pending migrations.")


def setup_parser(subparsers):
    """Setup migrate subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "migrate",
        help="Database migrations",
        description="Manage database schema migrations",
    )

    migrate_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available migration commands",
        dest="subcommand",
        required=True,
    )

    status_parser = migrate_subparsers.add_parser(
        "status", help="Show migration status"
    )
    status_parser.set_defaults(func=cmd_status)

    apply_parser = migrate_subparsers.add_parser(
        "apply", help="Apply pending migrations"
    )
    apply_parser.set_defaults(func=cmd_apply)

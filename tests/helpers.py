"""Helper utilities for tests."""

from pathlib import Path
import sqlite3

from cli.migrate import apply_pending_migrations


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Run all SQL migrations in order.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    apply_pending_migrations(conn, migrations_dir)


def insert_raw_category(conn: sqlite3.Connection, name: str, parent_id=None) -> int:
    """Insert a category row directly, bypassing all validation.

    Returns:
        The new row ID.
    """
    cursor = conn.execute(
        "INSERT INTO categories (name, parent_id) VALUES (?, ?)", (name, parent_id)
    )
    conn.commit()
    return cursor.lastrowid


def corrupt_parent(conn: sqlite3.Connection, category_id: int, parent_id: int) -> None:
    """Point a category at any parent, ignoring constraints."""
    conn.execute("PRAGMA foreign_keys = OFF")
    conn.execute(
        "UPDATE categories SET parent_id = ? WHERE id = ?", (parent_id, category_id)
    )
    conn.commit()
    conn.execute("PRAGMA foreign_keys = ON")

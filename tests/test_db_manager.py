"""Tests for the database manager and transaction handling."""

import sqlite3
import pytest

from cli.migrate import apply_pending_migrations, get_pending_migrations
from db.manager import DatabaseManager, is_unavailable_error, transaction_scope
from errors import BackendUnavailable, ConstraintViolation
from services.base import Services


@pytest.fixture
def file_db_manager(test_config):
    """DatabaseManager backed by a real file with migrations applied."""
    db_manager = DatabaseManager(test_config)
    with db_manager.connect() as conn:
        apply_pending_migrations(conn, db_manager.get_migrations_dir())
    return db_manager


class TestTransactionScope:
    """Tests for transaction_scope."""

    def test_commits_on_success(self, test_db, db_manager_with_schema):
        """Test that the block's writes are committed."""
        with transaction_scope(test_db, immediate=True):
            test_db.execute("INSERT INTO categories (name) VALUES ('A')")

        assert not test_db.in_transaction
        assert test_db.execute("SELECT COUNT(*) FROM categories").fetchone()[0] == 1

    def test_rolls_back_on_error(self, test_db, db_manager_with_schema):
        """Test that an error discards the block's writes."""
        with pytest.raises(RuntimeError):
            with transaction_scope(test_db, immediate=True):
                test_db.execute("INSERT INTO categories (name) VALUES ('A')")
                raise RuntimeError("boom")

        assert test_db.execute("SELECT COUNT(*) FROM categories").fetchone()[0] == 0

    def test_integrity_error_becomes_constraint_violation(
        self, test_db, db_manager_with_schema
    ):
        """Test the mapping of integrity errors."""
        with pytest.raises(ConstraintViolation):
            with transaction_scope(test_db):
                test_db.execute(
                    "INSERT INTO categories (name, parent_id) VALUES ('A', 9999)"
                )

    def test_statement_error_propagates_unmapped(
        self, test_db, db_manager_with_schema
    ):
        """Test that a faulty statement is not reported as an unavailable backend."""
        with pytest.raises(sqlite3.OperationalError) as exc_info:
            with transaction_scope(test_db, immediate=True):
                test_db.execute("INSERT INTO categories (name) VALUES ('A')")
                test_db.execute("SELECT * FROM no_such_table")

        assert not isinstance(exc_info.value, BackendUnavailable)
        assert test_db.execute("SELECT COUNT(*) FROM categories").fetchone()[0] == 0

    def test_is_unavailable_error(self, test_config, file_db_manager):
        """Test which operational errors count as an unavailable backend."""
        blocker = sqlite3.connect(test_config.db_path)
        other = sqlite3.connect(test_config.db_path, timeout=0.05)
        try:
            blocker.execute("BEGIN IMMEDIATE")
            with pytest.raises(sqlite3.OperationalError) as locked:
                other.execute("BEGIN IMMEDIATE")
            with pytest.raises(sqlite3.OperationalError) as syntax:
                other.execute("SELEC 1")
        finally:
            blocker.rollback()
            blocker.close()
            other.close()

        assert is_unavailable_error(locked.value)
        assert not is_unavailable_error(syntax.value)


class TestDatabaseManager:
    """Tests for DatabaseManager against a database file."""

    def test_connect_enables_foreign_keys(self, file_db_manager):
        """Test that every connection enforces foreign keys."""
        with file_db_manager.connect() as conn:
            assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_migrations_applied_once(self, file_db_manager):
        """Test that applied migrations are not pending any more."""
        with file_db_manager.connect() as conn:
            assert get_pending_migrations(conn, file_db_manager.get_migrations_dir()) == []
            assert apply_pending_migrations(conn, file_db_manager.get_migrations_dir()) == []

    def test_services_on_file_database(self, test_config, file_db_manager):
        """Test the category services end to end on a real file."""
        services = Services(test_config, db_manager=file_db_manager)
        root = services.category_tree.create("Root")
        child = services.category_tree.create("Child", parent_id=root.id)

        moved = services.category_tree.move(child.id, None)

        assert moved.parent_id is None
        assert services.category_tree.get_statistics().root_count == 2

    def test_locked_database_raises_backend_unavailable(
        self, test_config, file_db_manager
    ):
        """Test that a held write lock surfaces as BackendUnavailable."""
        test_config.db_timeout = 0.05
        services = Services(test_config, db_manager=file_db_manager)

        blocker = sqlite3.connect(test_config.db_path)
        try:
            blocker.execute("BEGIN IMMEDIATE")
            with pytest.raises(BackendUnavailable):
                services.category_tree.create("Blocked")
        finally:
            blocker.rollback()
            blocker.close()

        assert services.category_tree.list_all() == []

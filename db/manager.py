"""Database manager for SQLite connections, transactions and path management."""

import sqlite3
from contextlib import contextmanager
from config import Config, get_migrations_dir
from errors import BackendUnavailable, ConstraintViolation

# Primary result codes that mean the database cannot be reached or written
# right now, as opposed to a faulty statement.
_UNAVAILABLE_ERRORCODES = frozenset(
    [
        sqlite3.SQLITE_BUSY,
        sqlite3.SQLITE_LOCKED,
        sqlite3.SQLITE_CANTOPEN,
        sqlite3.SQLITE_IOERR,
        sqlite3.SQLITE_READONLY,
        sqlite3.SQLITE_FULL,
    ]
)


def is_unavailable_error(error: sqlite3.OperationalError) -> bool:
    """Check whether an operational error means the backend is unavailable.

    Extended result codes carry the primary code in their low byte.
    """
    errorcode = getattr(error, "sqlite_errorcode", None)
    if errorcode is None:
        return False
    return (errorcode & 0xFF) in _UNAVAILABLE_ERRORCODES


def configure_connection(conn: sqlite3.Connection) -> sqlite3.Connection:
    """Apply per-connection settings every cattree connection relies on.

    SQLite leaves foreign key enforcement off unless asked on each connection.
    """
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def transaction_scope(conn: sqlite3.Connection, immediate: bool = False):
    """Run a block as one unit of work on an open connection.

    Commits on success and rolls back on any error. Integrity failures become
    ConstraintViolation. A locked, busy or unreachable database becomes
    BackendUnavailable. Other operational errors, such as a malformed
    statement or a missing table, propagate unchanged.

    Args:
        conn: Open SQLite connection.
        immediate: Take the write lock up front (BEGIN IMMEDIATE) so that reads
            made for validation cannot be invalidated by a concurrent writer
            before commit.

    Yields:
        sqlite3.Connection: The same connection.
    """
    try:
        if immediate and not conn.in_transaction:
            conn.execute("BEGIN IMMEDIATE")
        yield conn
        conn.commit()
    except sqlite3.IntegrityError as e:
        conn.rollback()
        raise ConstraintViolation(str(e)) from e
    except sqlite3.OperationalError as e:
        conn.rollback()
        if is_unavailable_error(e):
            raise BackendUnavailable(str(e)) from e
        raise
    except Exception:
        conn.rollback()
        raise


class DatabaseManager:
    """Manages database connections and paths.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: Config):
        """Initialize the database manager.

        Args:
            config: Config object containing database configuration.
        """
        self.config = config

    @contextmanager
    def connect(self):
        """Get a database connection with automatic cleanup.

        Yields:
            sqlite3.Connection: Database connection.
        """
        db_path = self.config.db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            conn = sqlite3.connect(db_path, timeout=self.config.db_timeout)
            configure_connection(conn)
        except sqlite3.OperationalError as e:
            raise BackendUnavailable(f"Cannot open database {db_path}: {e}") from e

        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self, immediate: bool = False):
        """Get a connection wrapped in a single transaction.

        Args:
            immediate: Acquire the write lock before the first statement.

        Yields:
            sqlite3.Connection: Connection inside an open transaction.
        """
        with self.connect() as conn:
            with transaction_scope(conn, immediate=immediate):
                yield conn

    def get_db_path(self):
        """Get the current database path.

        Returns:
            Path: Path to the database file.
        """
        return self.config.db_path

    def get_migrations_dir(self):
        """Get the migrations directory path.

        Returns:
            Path: Path to the migrations directory.
        """
        return get_migrations_dir()

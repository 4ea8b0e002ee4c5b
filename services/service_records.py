"""ServiceRecord service for database operations."""

from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from models.service_record import ServiceRecord

_SERVICE_RECORD_SELECT_FIELDS = "id, category_id, title, description, image, created_at"

# Stays below SQLite's default limit on bound parameters.
_MAX_IDS_PER_QUERY = 500


class ServiceRecordService:
    """Service for managing service records attached to categories."""

    def __init__(self, db_manager):
        """Initialize the service record service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    @contextmanager
    def _connection(self, conn=None):
        if conn is not None:
            yield conn
        else:
            with self.db_manager.transaction() as own:
                yield own

    def create(
        self,
        category_id: int,
        title: str,
        description: str = "",
        image: Optional[str] = None,
    ) -> ServiceRecord:
        """Create a new service record.

        Args:
            category_id: ID of the category the service belongs to.
            title: Service title.
            description: Service description.
            image: Optional image path.

        Returns:
            The created ServiceRecord with id and created_at populated.

        Raises:
            ConstraintViolation: If the category does not exist.
        """
        with self.db_manager.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO service_records (category_id, title, description, image)
                VALUES (?, ?, ?, ?)
                """,
                (category_id, title, description, image),
            )
            record_id = cursor.lastrowid

            cursor = conn.execute(
                f"SELECT {_SERVICE_RECORD_SELECT_FIELDS} FROM service_records WHERE id = ?",
                (record_id,),
            )
            return self._row_to_service_record(cursor.fetchone())

    def find(self, record_id: int) -> Optional[ServiceRecord]:
        """Get a single service record by ID.

        Returns:
            ServiceRecord if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_SERVICE_RECORD_SELECT_FIELDS} FROM service_records WHERE id = ?",
                (record_id,),
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_service_record(row)
            return None

    def find_by_category_id(self, category_id: int, conn=None) -> List[ServiceRecord]:
        """Get all service records attached to a category, ordered by title."""
        with self._connection(conn) as c:
            cursor = c.execute(
                f"""
                SELECT {_SERVICE_RECORD_SELECT_FIELDS}
                FROM service_records
                WHERE category_id = ?
                ORDER BY title, id
                """,
                (category_id,),
            )
            return [self._row_to_service_record(row) for row in cursor.fetchall()]

    def find_by_category_ids(
        self, category_ids: Iterable[int], conn=None
    ) -> Dict[int, List[ServiceRecord]]:
        """Get the service records of several categories in batched queries.

        Args:
            category_ids: Category IDs to look up.

        Returns:
            Records by category ID, ordered by title. Categories without
            records are left out.
        """
        category_ids = list(category_ids)
        if not category_ids:
            return {}

        records = {}
        with self._connection(conn) as c:
            for start in range(0, len(category_ids), _MAX_IDS_PER_QUERY):
                batch = category_ids[start : start + _MAX_IDS_PER_QUERY]
                placeholders = ", ".join(["?"] * len(batch))
                cursor = c.execute(
                    f"""
                    SELECT {_SERVICE_RECORD_SELECT_FIELDS}
                    FROM service_records
                    WHERE category_id IN ({placeholders})
                    ORDER BY title, id
                    """,
                    batch,
                )
                for row in cursor.fetchall():
                    record = self._row_to_service_record(row)
                    records.setdefault(record.category_id, []).append(record)
        return records

    def reassign_category(self, from_category_id: int, to_category_id: int) -> int:
        """Move every service record of one category to another.

        Returns:
            Number of records moved.

        Raises:
            ConstraintViolation: If the target category does not exist.
        """
        with self.db_manager.transaction() as conn:
            cursor = conn.execute(
                "UPDATE service_records SET category_id = ? WHERE category_id = ?",
                (to_category_id, from_category_id),
            )
            return cursor.rowcount

    def delete_by_category_id(self, category_id: int, conn=None) -> int:
        """Delete every service record attached to a category.

        Args:
            category_id: Category whose records are removed.
            conn: Connection of an enclosing transaction, if any.

        Returns:
            Number of records deleted.
        """
        with self._connection(conn) as c:
            cursor = c.execute(
                "DELETE FROM service_records WHERE category_id = ?", (category_id,)
            )
            return cursor.rowcount

    def delete(self, record_id: int) -> bool:
        """Delete a service record by ID.

        Returns:
            True if the record was deleted, False if not found.
        """
        with self.db_manager.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM service_records WHERE id = ?", (record_id,)
            )
            return cursor.rowcount > 0

    def _row_to_service_record(self, row: tuple) -> ServiceRecord:
        return ServiceRecord(
            id=row[0],
            category_id=row[1],
            title=row[2],
            description=row[3],
            image=row[4],
            created_at=datetime.fromisoformat(row[5]) if row[5] else None,
        )

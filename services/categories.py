"""Category service for database operations.

This is the category store: plain reads and writes against the categories
table with no tree validation. Every method opens its own connection unless
one is passed in, in which case it runs inside the caller's transaction.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, List, Optional
from models.category import Category

_CATEGORY_SELECT_FIELDS = "id, name, image, parent_id, created_at, updated_at"

# Columns update() is allowed to write.
_UPDATABLE_FIELDS = ("name", "image", "parent_id")


class CategoryService:
    """Service for managing category rows."""

    def __init__(self, db_manager):
        """Initialize the category service.

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

    def find_all(self, conn=None) -> List[Category]:
        """Get all categories from the database in a single query.

        Returns:
            List of Category objects, ordered by name.
        """
        with self._connection(conn) as c:
            cursor = c.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories ORDER BY name, id"
            )
            return [self._row_to_category(row) for row in cursor.fetchall()]

    def find(self, category_id: int, conn=None) -> Optional[Category]:
        """Get a single category by ID.

        Args:
            category_id: The category ID to find.

        Returns:
            Category object if found, None otherwise.
        """
        with self._connection(conn) as c:
            cursor = c.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories WHERE id = ?",
                (category_id,),
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_category(row)
            return None

    def find_roots(self, conn=None) -> List[Category]:
        """Get all categories without a parent, ordered by name."""
        with self._connection(conn) as c:
            cursor = c.execute(
                f"""
                SELECT {_CATEGORY_SELECT_FIELDS}
                FROM categories
                WHERE parent_id IS NULL
                ORDER BY name, id
                """
            )
            return [self._row_to_category(row) for row in cursor.fetchall()]

    def find_children(self, parent_id: int, conn=None) -> List[Category]:
        """Get the direct children of a category, ordered by name."""
        return self.find_by_parent_ids([parent_id], conn=conn)

    def find_by_parent_ids(
        self, parent_ids: Iterable[int], conn=None
    ) -> List[Category]:
        """Get the direct children of several categories in one query.

        Args:
            parent_ids: Parent category IDs.

        Returns:
            Children of any of the given parents, ordered by name.
        """
        parent_ids = list(parent_ids)
        if not parent_ids:
            return []

        placeholders = ", ".join(["?"] * len(parent_ids))
        with self._connection(conn) as c:
            cursor = c.execute(
                f"""
                SELECT {_CATEGORY_SELECT_FIELDS}
                FROM categories
                WHERE parent_id IN ({placeholders})
                ORDER BY name, id
                """,
                parent_ids,
            )
            return [self._row_to_category(row) for row in cursor.fetchall()]

    def find_by_name_in_group(
        self,
        name: str,
        parent_id: Optional[int],
        exclude_id: Optional[int] = None,
        conn=None,
    ) -> Optional[Category]:
        """Find a category by exact name among the children of one parent.

        Args:
            name: Category name, compared case-sensitively.
            parent_id: Parent of the sibling group, None for root categories.
            exclude_id: Category ID to ignore (the category being renamed).

        Returns:
            Matching Category if any, None otherwise.
        """
        query = f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories WHERE name = ?"
        params = [name]

        if parent_id is None:
            query += " AND parent_id IS NULL"
        else:
            query += " AND parent_id = ?"
            params.append(parent_id)

        if exclude_id is not None:
            query += " AND id <> ?"
            params.append(exclude_id)

        with self._connection(conn) as c:
            row = c.execute(query, params).fetchone()
            if row:
                return self._row_to_category(row)
            return None

    def count_children(self, category_id: int, conn=None) -> int:
        """Count the direct children of a category."""
        with self._connection(conn) as c:
            cursor = c.execute(
                "SELECT COUNT(*) FROM categories WHERE parent_id = ?",
                (category_id,),
            )
            return cursor.fetchone()[0]

    def insert(
        self,
        name: str,
        image: Optional[str] = None,
        parent_id: Optional[int] = None,
        conn=None,
    ) -> Category:
        """Insert a new category row.

        Args:
            name: Category name, already validated.
            image: Optional image path.
            parent_id: Optional parent category ID.

        Returns:
            The created Category object with id and timestamps populated.

        Raises:
            ConstraintViolation: If the row breaks a database constraint.
        """
        with self._connection(conn) as c:
            cursor = c.execute(
                "INSERT INTO categories (name, image, parent_id) VALUES (?, ?, ?)",
                (name, image, parent_id),
            )
            return self.find(cursor.lastrowid, conn=c)

    def update(self, category_id: int, fields: dict, conn=None) -> Optional[Category]:
        """Write the given columns of an existing category.

        Args:
            category_id: The category ID to update.
            fields: Column name to new value. Only name, image and parent_id
                are accepted; columns not present are left untouched.

        Returns:
            The updated Category object, or None if no such category exists.

        Raises:
            ValueError: If fields names an unknown column.
            ConstraintViolation: If the new values break a database constraint.
        """
        unknown = set(fields) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update category fields: {sorted(unknown)}")

        assignments = [f"{column} = ?" for column in fields]
        assignments.append("updated_at = CURRENT_TIMESTAMP")
        params = list(fields.values()) + [category_id]

        with self._connection(conn) as c:
            cursor = c.execute(
                f"UPDATE categories SET {', '.join(assignments)} WHERE id = ?",
                params,
            )
            if cursor.rowcount == 0:
                return None
            return self.find(category_id, conn=c)

    def delete(self, category_id: int, conn=None) -> bool:
        """Delete a category by ID.

        Only the physical delete happens here; children and service records
        still referencing the row make the database reject it.

        Args:
            category_id: The category ID to delete.

        Returns:
            True if category was deleted, False if not found.

        Raises:
            ConstraintViolation: If other rows still reference the category.
        """
        with self._connection(conn) as c:
            cursor = c.execute("DELETE FROM categories WHERE id = ?", (category_id,))
            return cursor.rowcount > 0

    def _row_to_category(self, row: tuple) -> Category:
        """Convert a database row to a Category object.

        Args:
            row: Database row tuple.

        Returns:
            Category object.
        """
        return Category(
            id=row[0],
            name=row[1],
            image=row[2],
            parent_id=row[3],
            created_at=datetime.fromisoformat(row[4]) if row[4] else None,
            updated_at=datetime.fromisoformat(row[5]) if row[5] else None,
        )

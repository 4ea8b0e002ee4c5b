"""Ancestry checks over the categories table.

Both functions walk the parent chain upward one row at a time on the
connection they are given, so they can run inside the transaction of the
mutation they guard. A visited set bounds the walk if the stored data already
contains a cycle.
"""

import sqlite3
from typing import List, Optional


def _parent_of(conn: sqlite3.Connection, category_id: int) -> Optional[int]:
    row = conn.execute(
        "SELECT parent_id FROM categories WHERE id = ?", (category_id,)
    ).fetchone()
    return row[0] if row else None


def is_descendant(
    conn: sqlite3.Connection, ancestor_id: int, candidate_id: int
) -> bool:
    """Check whether candidate_id lies somewhere below ancestor_id.

    A category is never its own descendant; self-parenting is rejected
    separately by the caller.

    Args:
        conn: Open database connection.
        ancestor_id: ID of the potential ancestor.
        candidate_id: ID of the category whose parent chain is walked.

    Returns:
        True if ancestor_id appears in candidate_id's ancestor chain.
    """
    if ancestor_id == candidate_id:
        return False

    visited = {candidate_id}
    parent_id = _parent_of(conn, candidate_id)

    while parent_id is not None:
        if parent_id == ancestor_id:
            return True
        if parent_id in visited:
            return False
        visited.add(parent_id)
        parent_id = _parent_of(conn, parent_id)

    return False


def ancestor_ids(conn: sqlite3.Connection, category_id: int) -> List[int]:
    """List the ancestors of a category, nearest parent first.

    Args:
        conn: Open database connection.
        category_id: Category whose chain is walked.

    Returns:
        Parent ID, grandparent ID, and so on up to the root.
    """
    chain = []
    visited = {category_id}
    parent_id = _parent_of(conn, category_id)

    while parent_id is not None and parent_id not in visited:
        chain.append(parent_id)
        visited.add(parent_id)
        parent_id = _parent_of(conn, parent_id)

    return chain

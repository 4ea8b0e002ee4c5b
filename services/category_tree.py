"""Category tree service: validated mutations and tree reads.

Every mutation runs its validation reads and its write inside one immediate
transaction, so a failed check leaves the database untouched and a
concurrent writer cannot change the tree between the check and the commit.
"""

from typing import List, Optional
from errors import (
    CircularReference,
    DuplicateName,
    HasChildren,
    InvalidName,
    NotFound,
    SelfParent,
)
from models.category import (
    UNSET,
    Category,
    CategoryDetail,
    CategoryNode,
    CategoryStatistics,
)
from services.ancestry import ancestor_ids, is_descendant
from tools.statistics import compute_statistics
from tools.tree import DEFAULT_MAX_DEPTH, build_forest, build_subtree
from logger import get_logger

logger = get_logger()


def normalize_name(name) -> str:
    """Trim a category name, rejecting empty or whitespace-only names.

    Raises:
        InvalidName: If the name is missing or blank.
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidName()
    return name.strip()


class CategoryTreeService:
    """Service coordinating category mutations and tree reads."""

    def __init__(
        self,
        db_manager,
        store,
        service_records,
        max_subtree_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """Initialize the category tree service.

        Args:
            db_manager: Database manager used to open transactions.
            store: CategoryService used for row access.
            service_records: ServiceRecordService owning the leaf records.
            max_subtree_depth: Default depth bound for get_with_children.
        """
        self.db_manager = db_manager
        self.store = store
        self.service_records = service_records
        self.max_subtree_depth = max_subtree_depth

    # Reads

    def get(self, category_id: int) -> CategoryDetail:
        """Get a single category with its parent, children and service records.

        Raises:
            NotFound: If no category has this ID.
        """
        with self.db_manager.transaction() as conn:
            category = self.store.find(category_id, conn=conn)
            if category is None:
                raise NotFound()

            parent = None
            if category.parent_id is not None:
                parent = self.store.find(category.parent_id, conn=conn)

            return CategoryDetail(
                category=category,
                parent=parent,
                children=self.store.find_children(category_id, conn=conn),
                service_records=self.service_records.find_by_category_id(
                    category_id, conn=conn
                ),
            )

    def list_all(self) -> List[CategoryDetail]:
        """Get every category with its relations, ordered by name."""
        with self.db_manager.transaction() as conn:
            forest = build_forest(self.store.find_all(conn=conn))
            return self._details(conn, forest, [c.id for c in forest.nodes.values()])

    def list_roots(self) -> List[CategoryDetail]:
        """Get the root categories with their children and service records."""
        with self.db_manager.transaction() as conn:
            forest = build_forest(self.store.find_all(conn=conn))
            root_ids = [c.id for c in forest.nodes.values() if c.parent_id is None]
            return self._details(conn, forest, root_ids)

    def get_path(self, category_id: int) -> List[Category]:
        """Get the ancestors of a category, root first.

        Raises:
            NotFound: If no category has this ID.
        """
        with self.db_manager.transaction() as conn:
            if self.store.find(category_id, conn=conn) is None:
                raise NotFound()

            path = []
            for ancestor_id in reversed(ancestor_ids(conn, category_id)):
                path.append(self.store.find(ancestor_id, conn=conn))
            return path

    def get_tree(self) -> List[CategoryNode]:
        """Get the whole category forest, loaded in one query.

        Returns:
            Root nodes with all descendants populated.
        """
        return build_forest(self.store.find_all()).materialize()

    def get_with_children(
        self, category_id: int, max_depth: Optional[int] = None
    ) -> CategoryNode:
        """Get a category with its descendants down to a depth bound.

        Args:
            category_id: ID of the subtree root.
            max_depth: Levels to load below the root. Defaults to the
                configured bound.

        Raises:
            NotFound: If no category has this ID.
        """
        if max_depth is None:
            max_depth = self.max_subtree_depth

        node = build_subtree(self.store, category_id, max_depth=max_depth)
        if node is None:
            raise NotFound()
        return node

    def get_statistics(self) -> CategoryStatistics:
        return compute_statistics(build_forest(self.store.find_all()))

    # Mutations

    def create(
        self,
        name: str,
        parent_id: Optional[int] = None,
        image: Optional[str] = None,
    ) -> Category:
        """Create a category.

        Args:
            name: Category name; surrounding whitespace is removed.
            parent_id: Optional parent category ID.
            image: Optional image path from the image storage.

        Returns:
            The created Category.

        Raises:
            InvalidName: If the name is blank.
            NotFound: If the parent does not exist.
            DuplicateName: If a sibling already uses the name.
        """
        name = normalize_name(name)

        with self.db_manager.transaction(immediate=True) as conn:
            if parent_id is not None and self.store.find(parent_id, conn=conn) is None:
                raise NotFound("Parent category not found")

            self._check_duplicate_name(conn, name, parent_id)

            category = self.store.insert(name, image=image, parent_id=parent_id, conn=conn)

        logger.info(f"Created category '{category.name}' (ID: {category.id})")
        return category

    def update(
        self,
        category_id: int,
        name=UNSET,
        image=UNSET,
        parent_id=UNSET,
    ) -> Category:
        """Update a category.

        Only the fields that are passed are changed. Passing parent_id=None
        makes the category a root; leaving parent_id out keeps its parent.

        Args:
            category_id: The category ID to update.
            name: New name.
            image: New image path, or None to clear it.
            parent_id: New parent ID, or None to detach.

        Returns:
            The updated Category.

        Raises:
            NotFound: If the category or the new parent does not exist.
            InvalidName: If the new name is blank.
            SelfParent: If parent_id equals category_id.
            CircularReference: If the new parent is a descendant.
            DuplicateName: If the resulting sibling group already has the name.
        """
        with self.db_manager.transaction(immediate=True) as conn:
            category = self.store.find(category_id, conn=conn)
            if category is None:
                raise NotFound()

            fields = {}
            if parent_id is not UNSET:
                self._check_parent(conn, category_id, parent_id)
                fields["parent_id"] = parent_id
            if name is not UNSET:
                fields["name"] = normalize_name(name)
            if image is not UNSET:
                fields["image"] = image

            new_name = fields.get("name", category.name)
            new_parent_id = fields.get("parent_id", category.parent_id)
            if new_name != category.name or new_parent_id != category.parent_id:
                self._check_duplicate_name(
                    conn, new_name, new_parent_id, exclude_id=category_id
                )

            if fields:
                category = self.store.update(category_id, fields, conn=conn)

        logger.info(f"Updated category {category_id}: {sorted(fields)}")
        return category

    def move(self, category_id: int, new_parent_id: Optional[int] = None) -> Category:
        """Move a category under a new parent, or to the root level.

        Args:
            category_id: ID of the category to move.
            new_parent_id: ID of the new parent, None to make it a root.

        Returns:
            The moved Category.

        Raises:
            NotFound: If the category or the new parent does not exist.
            SelfParent: If new_parent_id equals category_id.
            CircularReference: If the new parent is a descendant.
            DuplicateName: If the target sibling group already has the name.
        """
        with self.db_manager.transaction(immediate=True) as conn:
            category = self.store.find(category_id, conn=conn)
            if category is None:
                raise NotFound()

            self._check_parent(conn, category_id, new_parent_id)

            if new_parent_id == category.parent_id:
                return category

            self._check_duplicate_name(
                conn, category.name, new_parent_id, exclude_id=category_id
            )

            category = self.store.update(
                category_id, {"parent_id": new_parent_id}, conn=conn
            )

        logger.info(f"Moved category {category_id} under parent {new_parent_id}")
        return category

    def remove(self, category_id: int, delete_service_records: bool = False) -> int:
        """Delete a category without children.

        Service records attached to the category must be removed or
        reassigned by their own service; otherwise the database rejects the
        delete. With delete_service_records the service record collaborator
        removes them inside the same transaction, so either the records and
        the category are both gone or neither is.

        Args:
            category_id: ID of the category to delete.
            delete_service_records: Also delete the attached service records.

        Returns:
            Number of service records deleted along with the category.

        Raises:
            NotFound: If no category has this ID.
            HasChildren: If the category still has child categories.
            ConstraintViolation: If service records still reference it.
        """
        removed_records = 0

        with self.db_manager.transaction(immediate=True) as conn:
            category = self.store.find(category_id, conn=conn)
            if category is None:
                raise NotFound()

            if self.store.count_children(category_id, conn=conn) > 0:
                logger.warning(
                    f"Refusing to delete category {category_id}: it has children"
                )
                raise HasChildren()

            if delete_service_records:
                removed_records = self.service_records.delete_by_category_id(
                    category_id, conn=conn
                )

            self.store.delete(category_id, conn=conn)

        logger.info(
            f"Deleted category '{category.name}' (ID: {category_id}) "
            f"with {removed_records} service record(s)"
        )
        return removed_records

    def _check_parent(self, conn, category_id: int, parent_id: Optional[int]) -> None:
        """Validate a proposed parent for an existing category."""
        if parent_id is None:
            return

        if parent_id == category_id:
            raise SelfParent()

        if is_descendant(conn, category_id, parent_id):
            logger.warning(
                f"Rejected parent {parent_id} for category {category_id}: "
                "it is a descendant"
            )
            raise CircularReference()

        if self.store.find(parent_id, conn=conn) is None:
            raise NotFound("Parent category not found")

    def _check_duplicate_name(
        self,
        conn,
        name: str,
        parent_id: Optional[int],
        exclude_id: Optional[int] = None,
    ) -> None:
        existing = self.store.find_by_name_in_group(
            name, parent_id, exclude_id=exclude_id, conn=conn
        )
        if existing is not None:
            raise DuplicateName(name)

    def _details(self, conn, forest, category_ids) -> List[CategoryDetail]:
        records = self.service_records.find_by_category_ids(category_ids, conn=conn)
        return [
            CategoryDetail(
                category=forest.nodes[category_id],
                parent=forest.nodes.get(forest.nodes[category_id].parent_id),
                children=forest.children_of(category_id),
                service_records=records.get(category_id, []),
            )
            for category_id in category_ids
        ]

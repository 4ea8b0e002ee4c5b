"""Category tree building tools.

The forest is kept as an index keyed by category ID: categories live in one
dict and parent/child links are lists of IDs. Nested CategoryNode views are
only produced on request and hold no references back to their parents.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
from models.category import Category, CategoryNode
from logger import get_logger

logger = get_logger()

DEFAULT_MAX_DEPTH = 10


@dataclass
class CategoryForest:
    """Index over a flat set of categories.

    Attributes:
        nodes: Category by ID.
        child_ids: Child IDs by parent ID, in input order.
        root_ids: IDs of categories without a (known) parent, in input order.
    """

    nodes: Dict[int, Category] = field(default_factory=dict)
    child_ids: Dict[int, List[int]] = field(default_factory=dict)
    root_ids: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, category_id: int) -> bool:
        return category_id in self.nodes

    def roots(self) -> List[Category]:
        return [self.nodes[category_id] for category_id in self.root_ids]

    def children_of(self, category_id: int) -> List[Category]:
        return [self.nodes[child_id] for child_id in self.child_ids[category_id]]

    def depth_of(self, category_id: int) -> int:
        """Number of edges between a category and its root."""
        depth = 0
        seen = {category_id}
        parent_id = self.nodes[category_id].parent_id
        while parent_id in self.nodes and parent_id not in seen:
            seen.add(parent_id)
            depth += 1
            parent_id = self.nodes[parent_id].parent_id
        return depth

    def materialize(self, root_id: Optional[int] = None) -> List[CategoryNode]:
        """Build nested CategoryNode views.

        Args:
            root_id: Materialize only the subtree under this category.
                Defaults to every root.

        Returns:
            List of root nodes with children populated.
        """
        start_ids = self.root_ids if root_id is None else [root_id]
        result = []

        for start_id in start_ids:
            top = CategoryNode(self.nodes[start_id])
            stack = [top]
            while stack:
                node = stack.pop()
                for child_id in self.child_ids[node.id]:
                    child = CategoryNode(self.nodes[child_id])
                    node.children.append(child)
                    stack.append(child)
            result.append(top)

        return result


def build_forest(categories: Iterable[Category]) -> CategoryForest:
    """Index a flat list of categories as a forest in two passes.

    The first pass registers every category with an empty child list; the
    second attaches each category to its parent, or to the roots if it has
    no parent. A category whose parent is not in the input is kept as a root
    so that the forest always holds every input category.

    Args:
        categories: Categories loaded in one query.

    Returns:
        CategoryForest over the input.
    """
    forest = CategoryForest()

    for category in categories:
        forest.nodes[category.id] = category
        forest.child_ids[category.id] = []

    for category in forest.nodes.values():
        if category.parent_id is None:
            forest.root_ids.append(category.id)
        elif category.parent_id in forest.nodes:
            forest.child_ids[category.parent_id].append(category.id)
        else:
            logger.warning(
                f"Category {category.id} references missing parent "
                f"{category.parent_id}; treating it as a root"
            )
            forest.root_ids.append(category.id)

    return forest


def build_subtree(
    store, category_id: int, max_depth: int = DEFAULT_MAX_DEPTH, conn=None
) -> Optional[CategoryNode]:
    """Load one category and its descendants down to max_depth levels.

    Descendants are fetched one level at a time (one query per level), so
    the rest of the forest is never loaded. Nodes at max_depth are returned
    without children; deeper levels are not loaded.

    Args:
        store: Category store (CategoryService).
        category_id: ID of the subtree root.
        max_depth: Deepest level to load; the root is level 0.
        conn: Optional connection to run the queries on.

    Returns:
        CategoryNode for the root, or None if it does not exist.
    """
    root = store.find(category_id, conn=conn)
    if root is None:
        return None

    top = CategoryNode(root)
    level = {root.id: top}
    seen = {root.id}
    depth = 0

    while level and depth < max_depth:
        next_level = {}
        for child in store.find_by_parent_ids(level.keys(), conn=conn):
            if child.id in seen:
                continue
            seen.add(child.id)
            node = CategoryNode(child)
            level[child.parent_id].children.append(node)
            next_level[child.id] = node
        level = next_level
        depth += 1

    if level and depth >= max_depth:
        logger.debug(
            f"Stopped loading subtree of category {category_id} at depth {max_depth}"
        )

    return top

"""Category tree statistics."""

from models.category import CategoryStatistics
from tools.tree import CategoryForest


def compute_statistics(forest: CategoryForest) -> CategoryStatistics:
    """Compute aggregate metrics for a category forest.

    Depth is counted in edges from the root, so a forest of roots only has a
    max_depth of 0, as does an empty forest.

    Args:
        forest: Forest built by build_forest.

    Returns:
        CategoryStatistics with total_count, root_count, max_depth and
        count_with_children.
    """
    count_with_children = sum(1 for ids in forest.child_ids.values() if ids)

    max_depth = 0
    for root_id in forest.root_ids:
        stack = [(root_id, 0)]
        while stack:
            category_id, depth = stack.pop()
            max_depth = max(max_depth, depth)
            for child_id in forest.child_ids[category_id]:
                stack.append((child_id, depth + 1))

    return CategoryStatistics(
        total_count=len(forest),
        root_count=len(forest.root_ids),
        max_depth=max_depth,
        count_with_children=count_with_children,
    )

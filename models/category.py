"""Category models for the service category tree."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from models.service_record import ServiceRecord


class _Unset:
    """Marker type for a field that was not supplied at all."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


# Distinguishes "not provided" from "provided as None" in update inputs.
UNSET = _Unset()


@dataclass
class Category:
    """Represents a node in the service category tree.

    Attributes:
        id: Unique identifier (auto-generated).
        name: Category name, trimmed, unique among its siblings.
        image: Optional public path of the category image.
        parent_id: Parent category ID, None for root categories.
        created_at: Timestamp when the category was created.
        updated_at: Timestamp of the last modification.
    """

    id: int
    name: str
    image: Optional[str] = None
    parent_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def to_dict(self) -> dict:
        """Convert category to a plain dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "parent_id": self.parent_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class CategoryNode:
    """Read-only view of a category together with its loaded descendants.

    Built by the tree tools from a category index; changing it does not
    change the database.
    """

    category: Category
    children: List["CategoryNode"] = field(default_factory=list)

    @property
    def id(self) -> int:
        return self.category.id

    @property
    def name(self) -> str:
        return self.category.name

    def walk(self):
        """Yield (node, depth) pairs in depth-first order, starting at depth 0."""
        stack = [(self, 0)]
        while stack:
            node, depth = stack.pop()
            yield node, depth
            for child in reversed(node.children):
                stack.append((child, depth + 1))

    def to_dict(self) -> dict:
        data = self.category.to_dict()
        data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass
class CategoryDetail:
    """A category with its parent, direct children and service records.

    Attributes:
        category: The category row.
        parent: Parent category, None for roots.
        children: Direct children, ordered by name.
        service_records: Service records attached to the category.
    """

    category: Category
    parent: Optional[Category] = None
    children: List[Category] = field(default_factory=list)
    service_records: List[ServiceRecord] = field(default_factory=list)

    @property
    def id(self) -> int:
        return self.category.id

    @property
    def name(self) -> str:
        return self.category.name

    @property
    def image(self) -> Optional[str]:
        return self.category.image

    @property
    def parent_id(self) -> Optional[int]:
        return self.category.parent_id

    @property
    def created_at(self) -> Optional[datetime]:
        return self.category.created_at

    @property
    def updated_at(self) -> Optional[datetime]:
        return self.category.updated_at

    @property
    def is_root(self) -> bool:
        return self.category.is_root

    def to_dict(self) -> dict:
        data = self.category.to_dict()
        data["parent"] = self.parent.to_dict() if self.parent else None
        data["children"] = [child.to_dict() for child in self.children]
        data["service_records"] = [record.to_dict() for record in self.service_records]
        return data


@dataclass
class CategoryStatistics:
    """Aggregate metrics over the whole category forest."""

    total_count: int = 0
    root_count: int = 0
    max_depth: int = 0
    count_with_children: int = 0

    def to_dict(self) -> dict:
        return {
            "total_count": self.total_count,
            "root_count": self.root_count,
            "max_depth": self.max_depth,
            "count_with_children": self.count_with_children,
        }

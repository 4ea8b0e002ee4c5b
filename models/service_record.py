"""ServiceRecord model: a leaf record attached to one category."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class ServiceRecord:
    """Represents a service offered under a category.

    Attributes:
        id: Unique identifier (auto-generated).
        category_id: ID of the category this service belongs to.
        title: Short service title.
        description: Free-form description.
        image: Optional public path of the service image.
        created_at: Timestamp when the record was created.
    """

    id: int
    category_id: int
    title: str
    description: str
    image: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert service record to a plain dictionary."""
        return {
            "id": self.id,
            "category_id": self.category_id,
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

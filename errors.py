"""Error taxonomy for category tree operations.

Each error kind carries a stable ``code`` and a default message so the
presentation layer can translate it. ``BackendUnavailable`` is kept outside
the ``CategoryError`` hierarchy: it reports a storage failure, not a rejected
operation.
"""


class CategoryError(Exception):
    """Base class for rejected category operations."""

    code = "category_error"
    default_message = "Category operation failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidName(CategoryError):
    code = "invalid_name"
    default_message = "Category name is required and cannot be empty"


class NotFound(CategoryError):
    code = "not_found"
    default_message = "Service category not found"


class DuplicateName(CategoryError):
    code = "duplicate_name"
    default_message = "Category with this name already exists at this level"

    def __init__(self, name: str = None):
        message = (
            f"Category with name '{name}' already exists at this level"
            if name is not None
            else None
        )
        super().__init__(message)
        self.name = name


class SelfParent(CategoryError):
    code = "self_parent"
    default_message = "Category cannot be its own parent"


class CircularReference(CategoryError):
    code = "circular_reference"
    default_message = "Cannot set parent to a descendant category"


class HasChildren(CategoryError):
    code = "has_children"
    default_message = (
        "Cannot delete category with child categories. "
        "Please delete or move child categories first."
    )


class ConstraintViolation(CategoryError):
    """The database rejected a write on referential or uniqueness grounds."""

    code = "constraint_violation"
    default_message = "Operation rejected by a database constraint"


class BackendUnavailable(Exception):
    """The database could not be reached or is locked."""

    code = "backend_unavailable"

    def __init__(self, message: str = "Category storage is unavailable"):
        super().__init__(message)
        self.message = message

"""Product domain exceptions.

Raised by the Service Layer when business rules are violated.
Each one carries its HTTP status through the ``modules.core.exceptions``
taxonomy, so the API layer only has to let them propagate.
"""

from __future__ import annotations

from modules.core.exceptions import ConflictError, NotFoundError, RequestValidationError


class ProductAlreadyExists(ConflictError):
    """Another product already uses this name (case-insensitive)."""

    default_message = "A product with that name already exists"


class ProductNotFound(NotFoundError):
    """The requested product does not exist."""

    default_message = "Product not found"


class ProductAlreadyInactive(RequestValidationError):
    default_message = "Product is already inactive"


class InvalidPrice(RequestValidationError):
    default_message = "Price must be at least $0.01"


class InvalidCategory(RequestValidationError):
    pass


class InvalidThreshold(RequestValidationError):
    default_message = "Threshold must be a non-negative number"


class InsufficientStock(RequestValidationError):
    """Applying the adjustment would leave stock below zero."""

    def __init__(self, current_stock: int) -> None:
        self.current_stock = current_stock
        super().__init__(f"Insufficient stock. Current stock: {current_stock}")

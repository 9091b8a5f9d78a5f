"""Product repository interface.

Extends ``IRepository[Product]`` with the look-ups required by the
business rules (unique name, category, low stock) and the paginated
listing used by the API.
"""

from __future__ import annotations

import math
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from modules.core.repositories.interfaces import IRepository
from modules.products.constants import DEFAULT_LOW_STOCK_THRESHOLD

if TYPE_CHECKING:
    from modules.products.models import Product


@dataclass(frozen=True)
class ProductPage:
    """One page of a listing plus the bookkeeping clients need to paginate."""

    products: List["Product"] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_more(self) -> bool:
        skip = (self.page - 1) * self.limit
        return skip + len(self.products) < self.total


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def find_all(
        self,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> ProductPage:
        """List products matching ``filters``, one page at a time."""

    @abstractmethod
    def iter_all(self) -> Iterator["Product"]:
        """Stream every product regardless of state."""

    @abstractmethod
    def find_by_name(self, name: str) -> Optional["Product"]:
        """Retrieve a product by name, ignoring case."""

    @abstractmethod
    def exists_by_name(self, name: str, exclude_id: Optional[str] = None) -> bool:
        """Whether a product other than ``exclude_id`` already uses ``name``."""

    @abstractmethod
    def soft_delete(self, id: str) -> Optional["Product"]:
        """Mark a product inactive. Returns ``None`` if it does not exist."""

    @abstractmethod
    def find_by_category(self, category: str) -> List["Product"]:
        """Active products in ``category``."""

    @abstractmethod
    def find_low_stock(
        self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    ) -> List["Product"]:
        """Active products whose stock is at or below ``threshold``."""

    @abstractmethod
    def increment_stock(self, id: str, quantity: int) -> Optional["Product"]:
        """Atomically add ``quantity`` (may be negative) to the stock.

        Raises ``InsufficientStock`` if the result would be negative.
        """

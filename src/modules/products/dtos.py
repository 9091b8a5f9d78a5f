"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (views) and the
Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
- ``StockAdjustmentDTO``: signed stock delta.
- ``ProductListQuery``: pagination, sorting and filters for listings.
- ``LowStockQuery``: threshold for the low-stock lookup.
- ``ProductStatistics``: output of the statistics use-case.

Every violation in a payload is reported at once; the error handler
joins them into a single message.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.products.constants import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    MAX_INTEGER,
    MAX_PAGE_SIZE,
    MAX_PRICE,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
)
from modules.products.models import ProductCategory

CATEGORY_OPTIONS = ", ".join(ProductCategory.values)


# ---------------------------------------------------------------------------
# Shared checks
# ---------------------------------------------------------------------------


def _check_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name is required.")
    if not NAME_MIN_LENGTH <= len(v) <= NAME_MAX_LENGTH:
        raise ValueError(
            f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters."
        )
    return v


def _check_description(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Description is required.")
    if not DESCRIPTION_MIN_LENGTH <= len(v) <= DESCRIPTION_MAX_LENGTH:
        raise ValueError(
            "Description must be between "
            f"{DESCRIPTION_MIN_LENGTH} and {DESCRIPTION_MAX_LENGTH} characters."
        )
    return v


def _check_price(v: Decimal) -> Decimal:
    if v < 0:
        raise ValueError("Price must be a non-negative number.")
    if v > MAX_PRICE:
        raise ValueError(f"Price must not exceed {MAX_PRICE}.")
    return v


def _check_stock(v: int) -> int:
    if v < 0:
        raise ValueError("Stock must be a non-negative integer.")
    if v > MAX_INTEGER:
        raise ValueError(f"Stock must not exceed {MAX_INTEGER}.")
    return v


def check_category(v: str) -> str:
    if v not in ProductCategory.values:
        raise ValueError(f"Invalid category. Options: {CATEGORY_OPTIONS}")
    return v


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``name`` 3-100 characters, ``description`` 10-500 (both trimmed).
    - ``price`` non-negative (the 0.01 minimum is a business rule).
    - ``category`` belongs to ``ProductCategory``.
    - ``stock`` non-negative, defaults to 0.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    price: Decimal
    category: str
    stock: int = 0

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("description")
    @classmethod
    def description_length(cls, v: str) -> str:
        return _check_description(v)

    @field_validator("price")
    @classmethod
    def price_non_negative(cls, v: Decimal) -> Decimal:
        return _check_price(v)

    @field_validator("category")
    @classmethod
    def category_in_set(cls, v: str) -> str:
        return check_category(v)

    @field_validator("stock")
    @classmethod
    def stock_non_negative(cls, v: int) -> int:
        return _check_stock(v)


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    All fields are optional; only supplied fields will be updated.
    ``isActive`` is not accepted here; soft delete has its own endpoint.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    category: Optional[str] = None
    stock: Optional[int] = None

    @field_validator("name")
    @classmethod
    def name_length(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_name(v)

    @field_validator("description")
    @classmethod
    def description_length(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_description(v)

    @field_validator("price")
    @classmethod
    def price_non_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return None if v is None else _check_price(v)

    @field_validator("category")
    @classmethod
    def category_in_set(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else check_category(v)

    @field_validator("stock")
    @classmethod
    def stock_non_negative(cls, v: Optional[int]) -> Optional[int]:
        return None if v is None else _check_stock(v)

    def changes(self) -> Dict[str, Any]:
        """Only the fields the client actually supplied."""
        return self.model_dump(exclude_none=True)


class StockAdjustmentDTO(BaseModel):
    """Signed stock delta: positive restocks, negative withdraws."""

    model_config = ConfigDict(frozen=True)

    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_in_range(cls, v: int) -> int:
        if abs(v) > MAX_INTEGER:
            raise ValueError(
                f"Quantity must be between -{MAX_INTEGER} and {MAX_INTEGER}."
            )
        return v


class ProductListQuery(BaseModel):
    """Query-string contract for ``GET /api/products``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    page: int = Field(DEFAULT_PAGE, ge=1, le=MAX_INTEGER)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    sort_by: Literal[
        "createdAt", "updatedAt", "name", "price", "stock", "category"
    ] = Field("createdAt", alias="sortBy")
    sort_order: Literal["asc", "desc"] = Field("desc", alias="sortOrder")
    category: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")
    min_price: Optional[Decimal] = Field(None, ge=0, alias="minPrice")
    max_price: Optional[Decimal] = Field(None, ge=0, alias="maxPrice")
    search: Optional[str] = None

    @field_validator("category")
    @classmethod
    def category_in_set(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else check_category(v)

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @model_validator(mode="after")
    def price_range_ordered(self) -> ProductListQuery:
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("minPrice must not be greater than maxPrice.")
        return self

    def filters(self) -> Dict[str, Any]:
        """Filter values keyed by their public (query-string) names."""
        return self.model_dump(
            by_alias=True,
            exclude_none=True,
            include={"category", "is_active", "min_price", "max_price", "search"},
        )


class LowStockQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    threshold: int = Field(DEFAULT_LOW_STOCK_THRESHOLD, le=MAX_INTEGER)


# ---------------------------------------------------------------------------
# Output DTO
# ---------------------------------------------------------------------------


class ProductStatistics(BaseModel):
    """Aggregate figures over the whole catalogue."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_products: int = Field(alias="totalProducts")
    active_products: int = Field(alias="activeProducts")
    inactive_products: int = Field(alias="inactiveProducts")
    low_stock_products: int = Field(alias="lowStockProducts")
    total_inventory_value: Decimal = Field(alias="totalInventoryValue")
    by_category: Dict[str, int] = Field(alias="byCategory")

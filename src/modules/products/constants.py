"""Product module constants."""

from __future__ import annotations

from decimal import Decimal

MIN_PRICE = Decimal("0.01")
MAX_PRICE = Decimal("99999999.99")

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 500

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

DEFAULT_LOW_STOCK_THRESHOLD = 10

# Largest value a stored integer column (stock, page offsets) accepts.
MAX_INTEGER = 2_147_483_647

# Public (camelCase) sort keys -> model fields.
SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "name": "name",
    "price": "price",
    "stock": "stock",
    "category": "category",
}

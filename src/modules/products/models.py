"""Product model with case-insensitive name uniqueness and stock control.

Business rules implemented:
- Name must be unique ignoring case (functional UNIQUE on ``LOWER(name)``).
- Price cannot be negative; the service layer additionally requires >= 0.01.
- Stock cannot be negative.
- Category belongs to a closed set (``ProductCategory``).
- Soft delete via ``is_active`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models.functions import Lower

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class ProductCategory(models.TextChoices):
    ELECTRONICS = "electronics", "Electronics"
    CLOTHING = "clothing", "Clothing"
    FOOD = "food", "Food"
    BOOKS = "books", "Books"
    OTHER = "other", "Other"


def capitalize_first(value: str) -> str:
    """Upper-case the first character only ("widget pro" -> "Widget pro")."""
    return value[:1].upper() + value[1:]


class Product(SoftDeleteModel):
    """Product aggregate root.

    ``name`` has its first character upper-cased on save.  Uniqueness is
    enforced by the database on ``LOWER(name)`` so "widget" and "WIDGET"
    collide even under concurrent inserts.
    """

    name = models.CharField(max_length=100)
    description = models.TextField(max_length=500)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    category = models.CharField(
        max_length=20,
        choices=ProductCategory.choices,
        db_index=True,
    )
    stock = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "products"
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                Lower("name"),
                name="products_name_ci_unique",
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.name:
            self.name = capitalize_first(self.name.strip())
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=str(self.id),
                name=self.name,
                category=self.category,
            )

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def is_available(self) -> bool:
        return self.is_active and self.stock > 0

    @property
    def formatted_price(self) -> str:
        return f"${Decimal(self.price):.2f}"

    @property
    def inventory_value(self) -> Decimal:
        return Decimal(self.price) * self.stock

    def __str__(self) -> str:
        return self.name

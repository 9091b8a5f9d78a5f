"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: look-ups return ``None``
instead of raising HTTP-level exceptions; the Service Layer decides
how to translate a missing entity into an API response.  Each method
issues a single query (plus a re-read where the updated row is returned).
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.products.constants import DEFAULT_LOW_STOCK_THRESHOLD
from modules.products.exceptions import InsufficientStock
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository, ProductPage

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Product:
        product = Product(**data)
        product.full_clean(validate_constraints=False)
        product.save()
        return product

    def find_all(
        self,
        filters: Optional[Dict[str, Any]] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> ProductPage:
        """List products with filters translated by ``ProductFilter``.

        Examples of valid filters::

            {"category": "books", "isActive": True}
            {"minPrice": Decimal("5"), "search": "widget"}
        """
        filterset = ProductFilter(data=filters or {}, queryset=Product.objects.all())
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)

        prefix = "-" if sort_order == "desc" else ""
        queryset = filterset.qs.order_by(f"{prefix}{sort_by}", f"{prefix}id")

        skip = (page - 1) * limit
        products = list(queryset[skip : skip + limit])
        total = queryset.count()
        return ProductPage(products=products, total=total, page=page, limit=limit)

    def iter_all(self) -> Iterator[Product]:
        return Product.objects.all().iterator()

    def find_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def find_by_name(self, name: str) -> Optional[Product]:
        return Product.objects.filter(name__iexact=name.strip()).first()

    def exists_by_name(self, name: str, exclude_id: Optional[str] = None) -> bool:
        queryset = Product.objects.filter(name__iexact=name.strip())
        if exclude_id:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    @transaction.atomic
    def update(self, id: str, data: Dict[str, Any]) -> Optional[Product]:
        """Apply a partial update and run field validators before saving."""
        product = self.find_by_id(id)
        if not product:
            return None
        for field, value in data.items():
            setattr(product, field, value)
        product.full_clean(validate_constraints=False)
        product.save(update_fields=list(data))
        logger.info("product.saved", product_id=str(product.id), fields=sorted(data))
        return product

    def soft_delete(self, id: str) -> Optional[Product]:
        product = self.find_by_id(id)
        if not product:
            return None
        product.soft_delete()
        return product

    def hard_delete(self, id: str) -> bool:
        """Permanently remove a product. ``False`` if nothing was deleted."""
        try:
            deleted, _ = Product.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        return deleted > 0

    def find_by_category(self, category: str) -> List[Product]:
        return list(Product.objects.active().filter(category=category))

    def find_low_stock(
        self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    ) -> List[Product]:
        return list(
            Product.objects.active().filter(stock__lte=threshold).order_by("stock", "name")
        )

    def increment_stock(self, id: str, quantity: int) -> Optional[Product]:
        """``UPDATE ... SET stock = stock + q WHERE id = ? AND stock >= -q``.

        The guard keeps stock non-negative even when two adjustments race
        past the service-layer read check.
        """
        queryset = Product.objects.filter(id=id)
        if quantity < 0:
            queryset = queryset.filter(stock__gte=-quantity)
        updated = queryset.update(stock=F("stock") + quantity, updated_at=timezone.now())
        product = self.find_by_id(id)
        if not updated and product is not None:
            raise InsufficientStock(product.stock)
        return product

"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Business rules enforced here:
- Name must be unique ignoring case (read check + store constraint).
- Price must be at least 0.01.
- Soft delete is rejected for products that are already inactive.
- Stock adjustments may not leave stock below zero.
- Category look-ups only accept the fixed category set.
"""

from __future__ import annotations

from collections import Counter
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List

import structlog
from django.db import IntegrityError

from modules.products.constants import DEFAULT_LOW_STOCK_THRESHOLD, MIN_PRICE, SORT_FIELDS
from modules.products.dtos import CATEGORY_OPTIONS, ProductStatistics
from modules.products.exceptions import (
    InsufficientStock,
    InvalidCategory,
    InvalidPrice,
    InvalidThreshold,
    ProductAlreadyExists,
    ProductAlreadyInactive,
    ProductNotFound,
)
from modules.products.models import Product, ProductCategory

if TYPE_CHECKING:
    from modules.products.dtos import (
        CreateProductDTO,
        ProductListQuery,
        UpdateProductDTO,
    )
    from modules.products.repositories.interfaces import IProductRepository, ProductPage

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a new product after enforcing uniqueness and price rules.

        Raises:
            ProductAlreadyExists: if the name is taken (case-insensitive).
            InvalidPrice: if the price is below 0.01.
        """
        log = logger.bind(name=dto.name)

        if self._repo.exists_by_name(dto.name):
            log.warning("product.duplicate_name")
            raise ProductAlreadyExists()

        self._check_price(dto.price)

        try:
            product = self._repo.create(dto.model_dump())
        except IntegrityError as exc:
            log.warning("product.duplicate_name", source="store")
            raise ProductAlreadyExists() from exc

        log.info("product.created", product_id=str(product.id))
        return product

    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Apply the supplied fields to an existing product.

        Raises:
            ProductNotFound: if the product does not exist.
            ProductAlreadyExists: if renaming onto another product's name.
            InvalidPrice: if a price below 0.01 is supplied.
        """
        log = logger.bind(product_id=str(id))
        product = self._get_or_raise(id)
        changes = dto.changes()

        name = changes.get("name")
        if name is not None and name != product.name:
            if self._repo.exists_by_name(name, exclude_id=id):
                log.warning("product.duplicate_name", name=name)
                raise ProductAlreadyExists("Another product already uses that name")

        if "price" in changes:
            self._check_price(changes["price"])

        try:
            updated = self._repo.update(id, changes)
        except IntegrityError as exc:
            raise ProductAlreadyExists("Another product already uses that name") from exc
        if updated is None:
            raise ProductNotFound()

        log.info("product.updated", fields=sorted(changes))
        return updated

    def delete_product(self, id: str) -> Product:
        """Soft-delete a product; it stays retrievable by id.

        Raises:
            ProductNotFound: if the product does not exist.
            ProductAlreadyInactive: if it was already soft-deleted.
        """
        product = self._get_or_raise(id)
        if not product.is_active:
            logger.warning("product.already_inactive", product_id=str(id))
            raise ProductAlreadyInactive()

        deleted = self._repo.soft_delete(id)
        if deleted is None:
            raise ProductNotFound()
        logger.info("product.soft_deleted", product_id=str(id))
        return deleted

    def permanent_delete_product(self, id: str) -> Dict[str, Any]:
        """Remove a product for good.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        self._get_or_raise(id)
        if not self._repo.hard_delete(id):
            raise ProductNotFound()
        logger.info("product.hard_deleted", product_id=str(id))
        return {"id": str(id), "deleted": True}

    def adjust_stock(self, id: str, quantity: int) -> Product:
        """Add ``quantity`` (negative to withdraw) to the product's stock.

        Raises:
            ProductNotFound: if the product does not exist.
            InsufficientStock: if the result would be negative.
        """
        product = self._get_or_raise(id)
        if product.stock + quantity < 0:
            logger.warning(
                "product.insufficient_stock",
                product_id=str(id),
                stock=product.stock,
                quantity=quantity,
            )
            raise InsufficientStock(product.stock)

        updated = self._repo.increment_stock(id, quantity)
        if updated is None:
            raise ProductNotFound()
        logger.info(
            "product.stock_adjusted",
            product_id=str(id),
            quantity=quantity,
            stock=updated.stock,
        )
        return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, query: ProductListQuery) -> ProductPage:
        """Return one page of products matching the query filters."""
        return self._repo.find_all(
            filters=query.filters(),
            page=query.page,
            limit=query.limit,
            sort_by=SORT_FIELDS[query.sort_by],
            sort_order=query.sort_order,
        )

    def get_product(self, id: str) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._get_or_raise(id)
        logger.info("product.retrieved", product_id=str(id))
        return product

    def get_products_by_category(self, category: str) -> List[Product]:
        if category not in ProductCategory.values:
            raise InvalidCategory(f"Invalid category. Options: {CATEGORY_OPTIONS}")
        return self._repo.find_by_category(category)

    def get_low_stock_products(
        self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    ) -> List[Product]:
        if threshold < 0:
            raise InvalidThreshold()
        return self._repo.find_low_stock(threshold)

    def get_statistics(self) -> ProductStatistics:
        """Aggregate counts and inventory value over the whole catalogue.

        Scans every record in-process; low stock uses the default threshold
        and only counts active products, matching the low-stock endpoint.
        """
        total = active = low_stock = 0
        inventory_value = Decimal("0")
        by_category: Counter[str] = Counter()

        for product in self._repo.iter_all():
            total += 1
            by_category[product.category] += 1
            inventory_value += product.inventory_value
            if product.is_active:
                active += 1
                if product.stock <= DEFAULT_LOW_STOCK_THRESHOLD:
                    low_stock += 1

        return ProductStatistics(
            total_products=total,
            active_products=active,
            inactive_products=total - active,
            low_stock_products=low_stock,
            total_inventory_value=inventory_value,
            by_category=dict(by_category),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_or_raise(self, id: str) -> Product:
        product = self._repo.find_by_id(id)
        if not product:
            raise ProductNotFound()
        return product

    @staticmethod
    def _check_price(price: Decimal) -> None:
        if price < MIN_PRICE:
            raise InvalidPrice()

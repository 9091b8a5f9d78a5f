"""Unit tests for ProductService.

The repository is a ``MagicMock`` so only the business rules are exercised:
- create_product: happy path, duplicate name, minimum price, store race.
- update_product: partial update, rename collision, not found.
- delete_product / permanent_delete_product.
- adjust_stock: bounds.
- category / low-stock look-ups and statistics.
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from django.db import IntegrityError

from modules.products.dtos import CreateProductDTO, ProductListQuery, UpdateProductDTO
from modules.products.exceptions import (
    InsufficientStock,
    InvalidCategory,
    InvalidPrice,
    InvalidThreshold,
    ProductAlreadyExists,
    ProductAlreadyInactive,
    ProductNotFound,
)
from modules.products.models import Product
from modules.products.services import ProductService

pytestmark = pytest.mark.unit

PRODUCT_ID = "0190b7a4-6f2c-7c3e-9a51-1d2e3f405060"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_repo():
    return MagicMock()


@pytest.fixture()
def service(mock_repo):
    return ProductService(repository=mock_repo)


def _product(**overrides) -> Product:
    defaults = {
        "name": "Widget",
        "description": "A fine widget",
        "price": Decimal("19.99"),
        "category": "electronics",
        "stock": 10,
    }
    defaults.update(overrides)
    return Product(**defaults)


def _create_dto(**overrides) -> CreateProductDTO:
    data = {
        "name": "Widget",
        "description": "A fine widget",
        "price": Decimal("19.99"),
        "category": "electronics",
    }
    data.update(overrides)
    return CreateProductDTO(**data)


# ===========================================================================
# create_product
# ===========================================================================


class TestCreateProduct:
    def test_success(self, service, mock_repo):
        mock_repo.exists_by_name.return_value = False
        mock_repo.create.side_effect = lambda data: _product(**data)

        product = service.create_product(_create_dto(stock=5))

        assert product.name == "Widget"
        assert product.stock == 5
        mock_repo.create.assert_called_once_with(
            {
                "name": "Widget",
                "description": "A fine widget",
                "price": Decimal("19.99"),
                "category": "electronics",
                "stock": 5,
            }
        )

    def test_duplicate_name_raises(self, service, mock_repo):
        mock_repo.exists_by_name.return_value = True

        with pytest.raises(ProductAlreadyExists):
            service.create_product(_create_dto())
        mock_repo.create.assert_not_called()

    @pytest.mark.parametrize("price", ["0", "0.00", "0.005"])
    def test_price_below_minimum(self, service, mock_repo, price):
        mock_repo.exists_by_name.return_value = False

        with pytest.raises(InvalidPrice, match=r"at least \$0.01"):
            service.create_product(_create_dto(price=Decimal(price)))

    def test_minimum_price_accepted(self, service, mock_repo):
        mock_repo.exists_by_name.return_value = False
        mock_repo.create.side_effect = lambda data: _product(**data)

        assert service.create_product(_create_dto(price=Decimal("0.01"))).price == Decimal(
            "0.01"
        )

    def test_store_unique_violation_maps_to_conflict(self, service, mock_repo):
        mock_repo.exists_by_name.return_value = False
        mock_repo.create.side_effect = IntegrityError("UNIQUE constraint failed")

        with pytest.raises(ProductAlreadyExists):
            service.create_product(_create_dto())


# ===========================================================================
# update_product
# ===========================================================================


class TestUpdateProduct:
    def test_partial_update(self, service, mock_repo):
        existing = _product()
        mock_repo.find_by_id.return_value = existing
        mock_repo.update.return_value = existing

        service.update_product(PRODUCT_ID, UpdateProductDTO(price=Decimal("24.99")))

        mock_repo.update.assert_called_once_with(PRODUCT_ID, {"price": Decimal("24.99")})
        mock_repo.exists_by_name.assert_not_called()

    def test_not_found(self, service, mock_repo):
        mock_repo.find_by_id.return_value = None

        with pytest.raises(ProductNotFound):
            service.update_product(PRODUCT_ID, UpdateProductDTO(stock=1))

    def test_rename_collision(self, service, mock_repo):
        mock_repo.find_by_id.return_value = _product(name="Widget")
        mock_repo.exists_by_name.return_value = True

        with pytest.raises(ProductAlreadyExists, match="Another product"):
            service.update_product(PRODUCT_ID, UpdateProductDTO(name="Gadget"))
        mock_repo.exists_by_name.assert_called_once_with("Gadget", exclude_id=PRODUCT_ID)

    def test_keeping_same_name_skips_check(self, service, mock_repo):
        existing = _product(name="Widget")
        mock_repo.find_by_id.return_value = existing
        mock_repo.update.return_value = existing

        service.update_product(PRODUCT_ID, UpdateProductDTO(name="Widget"))
        mock_repo.exists_by_name.assert_not_called()

    def test_price_below_minimum(self, service, mock_repo):
        mock_repo.find_by_id.return_value = _product()

        with pytest.raises(InvalidPrice):
            service.update_product(PRODUCT_ID, UpdateProductDTO(price=Decimal("0")))
        mock_repo.update.assert_not_called()


# ===========================================================================
# delete_product / permanent_delete_product
# ===========================================================================


class TestDeleteProduct:
    def test_soft_delete(self, service, mock_repo):
        existing = _product()
        mock_repo.find_by_id.return_value = existing
        mock_repo.soft_delete.return_value = existing

        assert service.delete_product(PRODUCT_ID) is existing
        mock_repo.soft_delete.assert_called_once_with(PRODUCT_ID)

    def test_already_inactive(self, service, mock_repo):
        mock_repo.find_by_id.return_value = _product(is_active=False)

        with pytest.raises(ProductAlreadyInactive):
            service.delete_product(PRODUCT_ID)
        mock_repo.soft_delete.assert_not_called()

    def test_not_found(self, service, mock_repo):
        mock_repo.find_by_id.return_value = None

        with pytest.raises(ProductNotFound):
            service.delete_product(PRODUCT_ID)

    def test_permanent_delete(self, service, mock_repo):
        mock_repo.find_by_id.return_value = _product()
        mock_repo.hard_delete.return_value = True

        assert service.permanent_delete_product(PRODUCT_ID) == {
            "id": PRODUCT_ID,
            "deleted": True,
        }

    def test_permanent_delete_not_found(self, service, mock_repo):
        mock_repo.find_by_id.return_value = None

        with pytest.raises(ProductNotFound):
            service.permanent_delete_product(PRODUCT_ID)
        mock_repo.hard_delete.assert_not_called()


# ===========================================================================
# adjust_stock
# ===========================================================================


class TestAdjustStock:
    def test_increment(self, service, mock_repo):
        mock_repo.find_by_id.return_value = _product(stock=10)
        mock_repo.increment_stock.return_value = _product(stock=15)

        assert service.adjust_stock(PRODUCT_ID, 5).stock == 15
        mock_repo.increment_stock.assert_called_once_with(PRODUCT_ID, 5)

    def test_decrement_to_zero(self, service, mock_repo):
        mock_repo.find_by_id.return_value = _product(stock=10)
        mock_repo.increment_stock.return_value = _product(stock=0)

        assert service.adjust_stock(PRODUCT_ID, -10).stock == 0

    def test_below_zero(self, service, mock_repo):
        mock_repo.find_by_id.return_value = _product(stock=10)

        with pytest.raises(InsufficientStock, match="Current stock: 10"):
            service.adjust_stock(PRODUCT_ID, -11)
        mock_repo.increment_stock.assert_not_called()

    def test_not_found(self, service, mock_repo):
        mock_repo.find_by_id.return_value = None

        with pytest.raises(ProductNotFound):
            service.adjust_stock(PRODUCT_ID, 1)


# ===========================================================================
# Queries
# ===========================================================================


class TestQueries:
    def test_get_product(self, service, mock_repo):
        existing = _product()
        mock_repo.find_by_id.return_value = existing
        assert service.get_product(PRODUCT_ID) is existing

    def test_get_product_not_found(self, service, mock_repo):
        mock_repo.find_by_id.return_value = None
        with pytest.raises(ProductNotFound):
            service.get_product(PRODUCT_ID)

    def test_list_maps_public_sort_key(self, service, mock_repo):
        query = ProductListQuery.model_validate(
            {"sortBy": "createdAt", "sortOrder": "asc", "page": 2, "category": "food"}
        )
        service.list_products(query)
        mock_repo.find_all.assert_called_once_with(
            filters={"category": "food"},
            page=2,
            limit=10,
            sort_by="created_at",
            sort_order="asc",
        )

    def test_by_category(self, service, mock_repo):
        mock_repo.find_by_category.return_value = []
        assert service.get_products_by_category("books") == []
        mock_repo.find_by_category.assert_called_once_with("books")

    def test_by_unknown_category(self, service, mock_repo):
        with pytest.raises(InvalidCategory, match="Options: electronics, clothing"):
            service.get_products_by_category("toys")

    def test_low_stock_default_threshold(self, service, mock_repo):
        service.get_low_stock_products()
        mock_repo.find_low_stock.assert_called_once_with(10)

    def test_low_stock_negative_threshold(self, service, mock_repo):
        with pytest.raises(InvalidThreshold):
            service.get_low_stock_products(-1)


class TestStatistics:
    def test_aggregates_every_record(self, service, mock_repo):
        mock_repo.iter_all.return_value = iter(
            [
                _product(category="books", price=Decimal("10.00"), stock=2),
                _product(category="books", price=Decimal("5.00"), stock=20),
                _product(category="food", price=Decimal("1.50"), stock=4, is_active=False),
            ]
        )

        stats = service.get_statistics()

        assert stats.total_products == 3
        assert stats.active_products == 2
        assert stats.inactive_products == 1
        assert stats.low_stock_products == 1
        assert stats.total_inventory_value == Decimal("126.00")
        assert stats.by_category == {"books": 2, "food": 1}

    def test_empty_catalogue(self, service, mock_repo):
        mock_repo.iter_all.return_value = iter([])

        stats = service.get_statistics().model_dump(by_alias=True)

        assert stats == {
            "totalProducts": 0,
            "activeProducts": 0,
            "inactiveProducts": 0,
            "lowStockProducts": 0,
            "totalInventoryValue": Decimal("0"),
            "byCategory": {},
        }

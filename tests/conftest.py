from decimal import Decimal

import pytest

from rest_framework.test import APIClient

from modules.products.models import Product


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def make_product():
    """Factory persisting a Product with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides) -> Product:
        counter["n"] += 1
        defaults = {
            "name": f"Product {counter['n']:03d}",
            "description": "A product used in tests",
            "price": Decimal("19.99"),
            "category": "electronics",
            "stock": 10,
        }
        defaults.update(overrides)
        return Product.objects.create(**defaults)

    return _make

"""Product API views.

Exposes the ``ProductService`` via HTTP using a DRF ViewSet.
Payloads are validated by the Pydantic DTOs before the service runs;
domain exceptions propagate to ``modules.core.exceptions.api_exception_handler``,
which writes the uniform error envelope; the view never swallows them.
"""

from __future__ import annotations

from typing import Any, Dict
from uuid import UUID

from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import RequestValidationError
from modules.core.responses import ApiResponse
from modules.products.dtos import (
    CreateProductDTO,
    LowStockQuery,
    ProductListQuery,
    StockAdjustmentDTO,
    UpdateProductDTO,
)
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService


def _validated_id(pk: str | None) -> str:
    try:
        return str(UUID(str(pk)))
    except ValueError:
        raise RequestValidationError("Invalid product ID") from None


def _payload(request: Request) -> Any:
    data = request.data
    return data.dict() if hasattr(data, "dict") else data


def _query(request: Request) -> Dict[str, str]:
    return request.query_params.dict()


class ProductViewSet(GenericViewSet):
    """ViewSet for Product operations.

    Uses ``ProductService`` with ``ProductDjangoRepository`` (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    queryset = Product.objects.all()
    serializer_class = ProductSerializer
    pagination_class = None
    filter_backends: list = []

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/products"""
        query = ProductListQuery.model_validate(_query(request))
        page = self._service.list_products(query)
        data = {
            "products": ProductSerializer(page.products, many=True).data,
            "pagination": {
                "total": page.total,
                "page": page.page,
                "limit": page.limit,
                "totalPages": page.total_pages,
                "hasMore": page.has_more,
            },
        }
        return ApiResponse.success(data, "Products retrieved successfully")

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/products/{pk}"""
        product = self._service.get_product(_validated_id(pk))
        return ApiResponse.success(ProductSerializer(product).data, "Product found")

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/products"""
        dto = CreateProductDTO.model_validate(_payload(request))
        product = self._service.create_product(dto)
        return ApiResponse.created(
            ProductSerializer(product).data, "Product created successfully"
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/products/{pk}"""
        product_id = _validated_id(pk)
        dto = UpdateProductDTO.model_validate(_payload(request))
        product = self._service.update_product(product_id, dto)
        return ApiResponse.success(
            ProductSerializer(product).data, "Product updated successfully"
        )

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/products/{pk} (soft delete)"""
        product = self._service.delete_product(_validated_id(pk))
        return ApiResponse.success(
            ProductSerializer(product).data, "Product deleted successfully"
        )

    @action(detail=True, methods=["delete"], url_path="permanent")
    def permanent_delete(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/products/{pk}/permanent"""
        result = self._service.permanent_delete_product(_validated_id(pk))
        return ApiResponse.success(result, "Product permanently deleted")

    @action(detail=True, methods=["patch"], url_path="stock")
    def update_stock(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/products/{pk}/stock

        Accepts ``{"quantity": N}`` where N is a signed delta.
        """
        product_id = _validated_id(pk)
        dto = StockAdjustmentDTO.model_validate(_payload(request))
        product = self._service.adjust_stock(product_id, dto.quantity)
        return ApiResponse.success(
            ProductSerializer(product).data, "Stock updated successfully"
        )

    # ------------------------------------------------------------------
    # Look-ups
    # ------------------------------------------------------------------

    @action(
        detail=False,
        methods=["get"],
        url_path=r"category/(?P<category>[^/.]+)",
    )
    def by_category(self, request: Request, category: str | None = None) -> Response:
        """GET /api/products/category/{category}"""
        products = self._service.get_products_by_category(category or "")
        return ApiResponse.success(
            ProductSerializer(products, many=True).data,
            f"Products in category {category}",
        )

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request: Request) -> Response:
        """GET /api/products/low-stock?threshold=N"""
        query = LowStockQuery.model_validate(_query(request))
        products = self._service.get_low_stock_products(query.threshold)
        return ApiResponse.success(
            ProductSerializer(products, many=True).data,
            f"Products with low stock (<= {query.threshold})",
        )

    @action(detail=False, methods=["get"], url_path="statistics")
    def statistics(self, request: Request) -> Response:
        """GET /api/products/statistics"""
        stats = self._service.get_statistics()
        return ApiResponse.success(
            stats.model_dump(by_alias=True), "Statistics retrieved successfully"
        )

"""Success envelope shared by every endpoint.

``{"success": true, "message": "...", "data": ...}``
"""

from __future__ import annotations

from typing import Any

from rest_framework import status
from rest_framework.response import Response


class ApiResponse:
    """Factory for enveloped DRF responses."""

    @staticmethod
    def envelope(data: Any, message: str, status_code: int) -> Response:
        return Response(
            {
                "success": status_code < 400,
                "message": message,
                "data": data,
            },
            status=status_code,
        )

    @classmethod
    def success(
        cls,
        data: Any,
        message: str = "Operation successful",
        status_code: int = status.HTTP_200_OK,
    ) -> Response:
        return cls.envelope(data, message, status_code)

    @classmethod
    def created(cls, data: Any, message: str = "Resource created successfully") -> Response:
        return cls.envelope(data, message, status.HTTP_201_CREATED)

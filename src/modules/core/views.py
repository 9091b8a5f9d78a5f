import time
from typing import Any, Dict

import structlog
from django.conf import settings
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

logger = structlog.get_logger()


def health_check(request: HttpRequest) -> JsonResponse:
    services: Dict[str, Dict[str, Any]] = {}
    healthy = True

    try:
        start = time.monotonic()
        conn = connections["default"]
        conn.ensure_connection()
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        services["database"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        services["database"] = {"status": "down"}
        healthy = False
        logger.error("health_check_db_failure", exc_info=True)

    logger.info("health_check_completed", status="healthy" if healthy else "unhealthy")

    return JsonResponse(
        {
            "success": healthy,
            "message": "API is running" if healthy else "API is degraded",
            "timestamp": timezone.now().isoformat(),
            "environment": settings.ENVIRONMENT,
            "services": services,
        },
        status=200 if healthy else 503,
    )


def api_info(request: HttpRequest) -> JsonResponse:
    return JsonResponse(
        {
            "success": True,
            "message": "Product Inventory API",
            "version": settings.API_VERSION,
            "endpoints": {
                "products": "/api/products",
                "health": "/health",
                "docs": "/api/docs",
            },
        }
    )

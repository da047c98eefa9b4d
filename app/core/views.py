"""
Core views providing infrastructure endpoints and response helpers.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks, plus the
helper every API view uses to turn a ServiceResult into a DRF Response.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import DatabaseError, connection
from django.http import JsonResponse
from rest_framework import status
from rest_framework.response import Response

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any

    from core.services import ServiceResult

logger = logging.getLogger(__name__)


def service_response(
    result: ServiceResult,
    success_status: int = status.HTTP_200_OK,
    serialize: Callable[[Any], Any] | None = None,
) -> Response:
    """
    Render a ServiceResult as the uniform API envelope.

    Args:
        result: Result returned by a service call
        success_status: Status for successful results
        serialize: Optional callable applied to result.data before rendering

    Returns:
        Response with {"success": True, "data": ...} or the error envelope,
        using the failure's status_code (400 when the service set none).
    """
    if result.success:
        if serialize is not None:
            result = result.map(serialize)
        return Response(result.to_response(), status=success_status)

    return Response(
        result.to_response(),
        status=result.status_code or status.HTTP_400_BAD_REQUEST,
    )


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Used by container health checks, load balancers and the processor's
    webhook endpoint monitoring.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"

    HTTP Status Codes:
        200: All systems operational
        503: Database unreachable

    Example Response:
        {
            "status": "healthy",
            "database": "connected"
        }
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except DatabaseError:
        logger.warning("Health check could not reach the database", exc_info=True)
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)

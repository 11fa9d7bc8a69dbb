"""API router factory with core endpoints."""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from schoolplan.utils.db import verify_db_connection

logger = logging.getLogger(__name__)


def create_api_router() -> APIRouter:
    """Create router with health checks and every resource router.

    Returns:
        APIRouter with planning, catalog and health endpoints.
    """
    from schoolplan.api.catalog import router as catalog_router
    from schoolplan.api.monthly_plans import router as monthly_plans_router
    from schoolplan.api.timetables import router as timetables_router
    from schoolplan.api.users import router as users_router

    router = APIRouter()

    @router.get("/health", tags=["Health"], status_code=status.HTTP_200_OK)
    async def health_check() -> dict:
        """Health check endpoint - basic application health.

        Returns:
            Health status response.
        """
        return {"status": "healthy", "service": "schoolplan"}

    @router.get(
        "/health/db",
        tags=["Health"],
        status_code=status.HTTP_200_OK,
        response_model=None,
    )
    async def health_check_db() -> JSONResponse:
        """Deep health check - includes database connectivity check.

        Returns:
            Health status with database connectivity information.
        """
        try:
            await verify_db_connection()
            return JSONResponse(
                status_code=status.HTTP_200_OK,
                content={"status": "healthy", "database": "connected"},
            )
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "status": "unhealthy",
                    "database": "disconnected",
                    "error": str(e),
                },
            )

    router.include_router(timetables_router)
    router.include_router(monthly_plans_router)
    router.include_router(catalog_router)
    router.include_router(users_router)

    return router

"""API route definitions.

Uses a factory pattern to avoid import-time settings loading.
This allows tests to import modules without requiring all environment
variables to be configured upfront.
"""

from fastapi import APIRouter

from speechkarma.api.routes.health import router as health_router
from speechkarma.api.routes.parties import router as parties_router
from speechkarma.api.routes.politicians import router as politicians_router
from speechkarma.api.routes.profiles import router as profiles_router
from speechkarma.api.routes.statements import router as statements_router


def create_api_router() -> APIRouter:
    """Create and configure the API router.

    Returns:
        Configured APIRouter with all routes registered.
    """
    api_router = APIRouter()
    api_router.include_router(health_router, tags=["health"])
    api_router.include_router(statements_router)
    api_router.include_router(politicians_router)
    api_router.include_router(parties_router)
    api_router.include_router(profiles_router)
    return api_router


__all__ = ["create_api_router"]

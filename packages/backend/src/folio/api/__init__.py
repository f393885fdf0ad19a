"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied per route (authenticate / require_admin), not
per router, because /admin mixes public routes (setup, status) with
admin-only ones (reset-password, info).
"""

from fastapi import APIRouter

from folio.api.admin import router as admin_router
from folio.api.auth import router as auth_router
from folio.api.health import router as health_router


def build_api_router(prefix: str) -> APIRouter:
    api_router = APIRouter(prefix=prefix)
    api_router.include_router(health_router, tags=["health"])
    api_router.include_router(auth_router, tags=["auth"])
    api_router.include_router(admin_router, tags=["admin"])
    return api_router

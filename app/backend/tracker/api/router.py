"""Top-level API router."""

from fastapi import APIRouter

from tracker.api.routes.activity import router as activity_router
from tracker.api.routes.allocations import router as allocations_router
from tracker.api.routes.catalog import router as catalog_router
from tracker.api.routes.dashboards import router as dashboards_router
from tracker.api.routes.exports import router as exports_router
from tracker.api.routes.health import router as health_router
from tracker.api.routes.reports import router as reports_router
from tracker.api.routes.utilizations import router as utilizations_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(catalog_router)
api_router.include_router(allocations_router)
api_router.include_router(utilizations_router)
api_router.include_router(activity_router)
api_router.include_router(reports_router)
api_router.include_router(dashboards_router)
api_router.include_router(exports_router)

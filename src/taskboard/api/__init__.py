"""API route aggregation.

All routers registered here get mounted in main.py under /api.
Health and auth are open; the task router requires a valid bearer token,
applied once at include_router level.
"""

from fastapi import APIRouter, Depends

from taskboard.api.auth import router as auth_router
from taskboard.api.health import router as health_router
from taskboard.api.tasks import router as tasks_router
from taskboard.auth.dependencies import get_current_user

_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes, no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)

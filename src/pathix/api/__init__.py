"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: Auth is not applied at the include_router level here because
each router mixes open and protected routes (e.g. GET /maps/{id} is
public, DELETE /maps/{id} is not). Protected handlers declare the one
shared dependency, pathix.auth.dependencies.get_current_identity.
"""

from fastapi import APIRouter

from pathix.api.auth import router as auth_router
from pathix.api.health import router as health_router
from pathix.api.maps import router as maps_router
from pathix.api.themes import router as themes_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(maps_router, tags=["maps"])
api_router.include_router(themes_router, tags=["themes"])

"""API routers for the store viewer."""

from app.routers.simulation import router as simulation_router
from app.routers.viewer import router as viewer_router

__all__ = ["simulation_router", "viewer_router"]

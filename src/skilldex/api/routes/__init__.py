"""Routes package."""

from skilldex.api.routes.admin import router as admin_router
from skilldex.api.routes.ask import router as ask_router
from skilldex.api.routes.health import router as health_router
from skilldex.api.routes.run import router as run_router

__all__ = [
    "admin_router",
    "ask_router",
    "health_router",
    "run_router",
]

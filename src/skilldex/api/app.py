"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skilldex import __version__
from skilldex.api.deps import set_hub, set_sessions
from skilldex.api.routes import admin_router, ask_router, health_router, run_router
from skilldex.api.sessions import SessionStore
from skilldex.bootstrap import create_hub
from skilldex.config import get_settings
from skilldex.hub import KnowledgeHub
from skilldex.observability import configure_logging


def create_app(hub: KnowledgeHub | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        hub: Prebuilt hub; when omitted one is built from settings at startup
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        configure_logging(settings.log_level, json=settings.log_json)
        active = hub or create_hub(settings)
        set_hub(active)
        set_sessions(
            SessionStore(settings.session_cache_size, settings.session_ttl_seconds)
        )
        await active.initialize()

        yield

        # Shutdown
        await active.close()
        set_hub(None)
        set_sessions(None)

    app = FastAPI(
        title="Skilldex",
        description="Discovery and invocation of agent skills, tools and resources",
        version=__version__,
        lifespan=lifespan,
    )

    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(ask_router)
    app.include_router(run_router)
    app.include_router(admin_router)
    app.include_router(health_router)

    @app.get("/")
    async def root():
        return {
            "name": "Skilldex",
            "version": __version__,
            "docs": "/docs",
        }

    return app


# Create app instance for uvicorn
app = create_app()

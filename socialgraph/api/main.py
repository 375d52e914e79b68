"""
FastAPI application entry point for the campus social graph API.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from socialgraph.api import config
from socialgraph.api.routers import graph, suggestions, users, system
from socialgraph.services import GraphServices, build_services
from socialgraph.utils.logging_config import configure_api_logging


def create_app(
    db_path: Optional[str] = None,
    cache_enabled: Optional[bool] = None,
    services: Optional[GraphServices] = None,
) -> FastAPI:
    """
    Build the API with its services constructed once.

    Args:
        db_path: Database path or URL (defaults to DATABASE_URL / data/socialgraph.db)
        cache_enabled: Override ADJACENCY_CACHE_ENABLED
        services: Pre-built services container (takes precedence)
    """
    app = FastAPI(
        title="Campus Social Graph API",
        description="Follow graph, relationship strength and people-you-may-know suggestions",
        version="1.0.0",
    )

    app.state.services = services or build_services(db_path=db_path, cache_enabled=cache_enabled)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(suggestions.router)
    app.include_router(graph.router)
    app.include_router(users.router)
    app.include_router(system.router)

    @app.get("/")
    def root():
        """Root endpoint."""
        return {
            "message": "Campus Social Graph API",
            "docs": "/docs",
            "health": "/api/health",
        }

    return app


def main():
    """Run the API with uvicorn (`socialgraph-api` console script)."""
    import uvicorn

    configure_api_logging(level=config.get_log_level())
    uvicorn.run(
        "socialgraph.api.main:create_app",
        factory=True,
        host=config.get_api_host(),
        port=config.get_api_port(),
    )


if __name__ == "__main__":
    main()

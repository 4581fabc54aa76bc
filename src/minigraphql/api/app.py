"""
Main FastAPI application for the minigraphql services
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from .. import __version__
from ..config import settings
from ..database.seed_data import load_stores
from ..graphql.graphiql import render_graphiql
from ..graphql.schema import (
    create_graphql_router,
    create_post_service,
    create_tutorial_service,
    validate_schema,
)
from ..logging import configure_logging, get_logger
from ..middleware import LoggingContextMiddleware

# Configure logging before creating logger
configure_logging(debug=settings.debug)
logger = get_logger(__name__)

TUTORIAL_ENDPOINT = "/graphql"
POST_ENDPOINT = "/posts/graphql"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting minigraphql API...")
    try:
        stores = {name: service.store for name, service in app.state.services.items()}
        load_stores(stores, seed=settings.seed_on_startup)
    except Exception as e:
        # Fail fast: the services are useless without their data
        logger.error("Failed to load service data", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("Shutting down minigraphql API...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="minigraphql API",
        description="GraphQL demo services over tutorials and posts",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(LoggingContextMiddleware)

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    services = {
        "tutorial": create_tutorial_service(),
        "post": create_post_service(),
    }
    app.state.services = services

    # Validate schemas at startup so a broken schema never serves traffic
    for service in services.values():
        validate_schema(service)

    endpoints = {"tutorial": TUTORIAL_ENDPOINT, "post": POST_ENDPOINT}
    for name, path in endpoints.items():
        app.include_router(
            create_graphql_router(services[name], path=path, graphiql=settings.graphiql)
        )
    logger.info(
        "GraphQL endpoints initialized successfully",
        endpoints=[TUTORIAL_ENDPOINT, POST_ENDPOINT],
    )

    @app.get("/health")
    async def health_check():  # pyright: ignore [reportUnusedFunction]
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "records": {name: len(service.store) for name, service in services.items()},
        }

    if settings.graphiql:

        @app.get("/", response_class=HTMLResponse)
        async def graphiql_page():  # pyright: ignore [reportUnusedFunction]
            """GraphiQL page for the tutorial service."""
            return render_graphiql(TUTORIAL_ENDPOINT)

    return app


# Create the main application instance
app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "minigraphql.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )

"""Main entry point for the DeFi trust engine server."""

# Standard library imports
import argparse
from contextlib import asynccontextmanager
from typing import Optional

# Third-party library imports
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Internal imports
from defi_trust import __version__
from defi_trust.api import contract_router, platform_router, rug_check_router, wallet_router
from defi_trust.api.error_handling import register_exception_handlers, success_response
from defi_trust.config import get_server_config
from defi_trust.dependencies import ServiceContainer, build_container
from defi_trust.logging_config import RequestIdMiddleware, configure_logging, get_logger

logger = get_logger(__name__)

APP_NAME = "DeFi Trust Engine"


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        container: Prebuilt services; built from the environment on startup when omitted

    Returns:
        The configured application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services = container or build_container()
        app.state.container = services

        monitor_config = services.config.monitor
        if monitor_config.enable_periodic_sync:
            await services.monitor.start_periodic_sync(monitor_config.sync_interval)

        logger.info(f"{APP_NAME} started (Environment: {services.config.server.environment})")
        try:
            yield
        finally:
            await services.close()
            logger.info(f"{APP_NAME} stopped")

    app = FastAPI(
        title=APP_NAME,
        description="Trust scoring, caching and monitoring for Solana DeFi contracts",
        version=__version__,
        lifespan=lifespan,
    )

    # Add middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add request ID middleware
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    # Include routers
    app.include_router(rug_check_router)
    app.include_router(contract_router)
    app.include_router(wallet_router)
    app.include_router(platform_router)

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        services: ServiceContainer = request.app.state.container
        return success_response({
            "status": "healthy",
            "monitored": len(services.monitor),
            "caches": [services.engine.cache.stats(), services.analyzer.cache.stats()],
        })

    @app.get("/version")
    async def version():
        """Get API version information."""
        return success_response({"version": __version__, "name": APP_NAME})

    return app


def run_server(port=None):
    """Run the server from command line.

    Args:
        port: Optional port override

    This function is used as an entry point in setup.py.
    """
    config = get_server_config()
    configure_logging(config.log_level)

    port = config.port if port is None else int(port)
    logger.info(
        f"Starting {APP_NAME} on {config.host}:{port} (Environment: {config.environment})"
    )

    uvicorn.run(
        "defi_trust.main:app",
        host=config.host,
        port=port,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )


def main():
    """Parse command line arguments and run the server."""
    parser = argparse.ArgumentParser(description=APP_NAME)
    parser.add_argument("--port", type=int, help="Server port")
    args = parser.parse_args()

    run_server(port=args.port)


app = create_app()


if __name__ == "__main__":
    main()

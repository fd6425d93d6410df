"""Chaincode Lifecycle API.

Each organization runs one instance. The deploy endpoint drives the whole
channel; install and approve are called by the other organizations'
instances while they deploy.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from lifecycle import __version__
from lifecycle.api.routes import lifecycle as lifecycle_routes
from lifecycle.config import get_settings
from lifecycle.errors import LifecycleError
from lifecycle.orchestrator.service import LifecycleService

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    service = None
    if not lifecycle_routes.is_initialized():
        service = LifecycleService(settings)
        lifecycle_routes.init_service(service)

    if not settings.msp_id:
        logger.warning("CORE_PEER_LOCALMSPID is not set; every node will be treated as remote")
    logger.info(f"Lifecycle API ready for {settings.msp_id or '<unknown MSP>'}")
    yield
    # Shutdown
    logger.warning("Stopping server")
    if service is not None:
        service.close()
        lifecycle_routes.init_service(None)


app = FastAPI(
    title="Chaincode Lifecycle API",
    description="Installs, approves and commits external-service chaincode across a channel.",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(LifecycleError)
async def lifecycle_error_handler(request: Request, exc: LifecycleError) -> PlainTextResponse:
    logger.error(f"Error: {exc}")
    return PlainTextResponse(f"Error: {exc}", status_code=500)


app.include_router(lifecycle_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "msp_id": settings.msp_id,
        "version": __version__,
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Listening on {settings.host}:{settings.port}")
    uvicorn.run(
        "lifecycle.api.main:app",
        host=settings.host,
        port=settings.port,
    )

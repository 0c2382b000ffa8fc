"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .wiring.bootstrap import close_odata_client

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting School Admin API...")
    logger.info("iDempiere API: %s", settings.idempiere_api_url)
    logger.info("CORS origins: %s", settings.cors_origins_list)

    yield

    await close_odata_client()
    logger.info("Shutting down School Admin API...")


app = FastAPI(
    title="School Admin API",
    description="Filtered, paginated access to iDempiere models",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz")
async def healthz():
    """Liveness probe - zero dependencies, confirms process is responsive."""
    return {"status": "ok"}


# Include API routers
from .api.v1.router import router as api_router
app.include_router(api_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "schooladmin.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )

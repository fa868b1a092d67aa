import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.database import init_db
from app.core.logging import configure_logging
from app.api.error_handlers import register_exception_handlers
from app.api.middleware import register_request_logging
from app.api.routes import compatibilities, metals, products, users

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage app lifecycle events.

    Startup: configure logging, create tables and seed the version counter
    """
    configure_logging()
    init_db()
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started ({settings.ENVIRONMENT})")
    yield
    logger.info(f"{settings.APP_NAME} shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description="Users, products and the chemical/metal compatibility matrix",
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# CORS middleware - allows frontend to make requests to backend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_request_logging(app)
register_exception_handlers(app)

# Register API route modules
# All routes are prefixed with /api for consistency
app.include_router(users.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(metals.router, prefix="/api")
app.include_router(compatibilities.router, prefix="/api")


@app.get("/")
def root():
    """Root endpoint - API information"""
    return {"success": True, "message": settings.APP_NAME, "version": settings.APP_VERSION}


@app.get("/health")
def health():
    """Health check endpoint - used by monitoring/deployment tools"""
    return {
        "success": True,
        "message": "Server is healthy",
        "data": {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "uptime": round(time.monotonic() - STARTED_AT, 3),
        },
    }

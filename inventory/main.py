from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging

from inventory.config import get_settings
from inventory.database import engine, Base
from inventory.api import auth, health, products, upload
from inventory.exceptions import (
    InventoryError,
    inventory_error_handler,
    http_exception_handler,
    request_validation_handler,
    generic_exception_handler,
)
from inventory.utils.storage import URL_PREFIX, storage

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Starting up application...")

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    storage.ensure_dirs()
    logger.info(f"File uploads available at {URL_PREFIX}")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    engine.dispose()


# Create FastAPI application
app = FastAPI(
    title="Inventory API",
    description="""
    Product catalog backend for a single store or team.

    - **Products**: CRUD over the product catalog
    - **Uploads**: Image and document upload, served back under `/uploads`
    - **Auth**: User registration and 24-hour bearer tokens

    Errors are always returned as `{"error": "<message>"}`.
    """,
    version=settings.VERSION,
    lifespan=lifespan
)

# Register exception handlers
app.add_exception_handler(InventoryError, inventory_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(health.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(upload.router, prefix="/api")

# Serve uploaded files
app.mount(URL_PREFIX, StaticFiles(directory=storage.root, check_dir=False), name="uploads")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": "Inventory API",
        "version": settings.VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/api/ping"
    }

"""
Request Ingest - FastAPI Application Entry Point

Imports HTTP requests from curl commands, Postman collections and Insomnia
exports into one canonical shape, and keeps a de-duplicated request history
alongside a collection of saved requests.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS, LOG_LEVEL
from .database import SessionLocal, init_db
from .deps import build_stores
from .exceptions import register_exception_handlers
from .routers import history, imports, requests
from .services.blob_store import SqlBlobStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Startup: Initialize database and stores, unless a test installed its own
    if getattr(app.state, "stores", None) is None:
        init_db()
        app.state.stores = build_stores(SqlBlobStore(SessionLocal))
        logger.info("Request stores ready")
    yield


app = FastAPI(
    title="Request Ingest",
    description="Import, de-duplicate and store HTTP requests from curl, Postman and Insomnia",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
register_exception_handlers(app)


@app.get("/")
async def root():
    """Root endpoint returning API information."""
    return {
        "name": "Request Ingest",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Register routers
app.include_router(imports.router)
app.include_router(history.router)
app.include_router(requests.router)

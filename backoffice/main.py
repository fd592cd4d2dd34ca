from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from backoffice.database.database import create_tables

# Import middleware
from backoffice.common.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware

# Import routers
from backoffice.modules.sellers.router import sellers_router
from backoffice.modules.exit_notes.router import exit_notes_router, seller_notes_router
from backoffice.modules.payments.router import (
    payments_router,
    note_payments_router,
    seller_payments_router
)
from backoffice.modules.balances.router import balances_router, seller_balances_router

# Import models for table creation
import backoffice.common.sequences
import backoffice.modules.sellers.models
import backoffice.modules.exit_notes.models
import backoffice.modules.payments.models

from backoffice.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title="Consignment Back-office API",
    description="Notas de salida, pagos y saldos de vendedores en consignación",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Add your frontend URLs
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sellers_router)
app.include_router(seller_notes_router)
app.include_router(seller_payments_router)
app.include_router(seller_balances_router)
app.include_router(exit_notes_router)
app.include_router(note_payments_router)
app.include_router(payments_router)
app.include_router(balances_router)


@app.get("/")
async def read_root():
    return {
        "message": "Consignment Back-office API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


@app.on_event("startup")
async def startup_event():
    logger.info("Back-office API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    # Create database tables (only for development - no migrations)
    if settings.ENVIRONMENT == "development":
        await create_tables()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Back-office API shutting down...")

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from app.database.database import sync_engine, Base

# Import middleware and error handlers
from app.common.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from app.common.error_handlers import register_error_handlers

# Import routers
from app.modules.auth.router import auth_router
from app.modules.categories.router import categories_router
from app.modules.products.router import product_router
from app.modules.contacts.router import customers_router, suppliers_router
from app.modules.invoices.router import router as invoices_router
from app.modules.purchases.router import purchases_router
from app.modules.reports.routers import (
    sales_router as sales_reports_router,
    purchases_router as purchases_reports_router,
    financial_router as financial_reports_router,
    inventory_router as inventory_reports_router
)

# Import models for table creation
import app.modules.auth.models
import app.modules.categories.models
import app.modules.products.models
import app.modules.contacts.models
import app.modules.invoices.models
import app.modules.purchases.models

from app.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Billing Ledger API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"Currency: {settings.CURRENCY}, payment terms: {settings.DEFAULT_PAYMENT_TERMS_DAYS} days")
    yield
    logger.info("Billing Ledger API shutting down...")


# FastAPI app
app = FastAPI(
    title="Billing Ledger API",
    description="Small-business billing API: invoices, purchases, payments and financial reports",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    lifespan=lifespan
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(auth_router, prefix="/auth", tags=["Auth"])
app.include_router(categories_router, prefix="/categories")
app.include_router(product_router)
app.include_router(customers_router)
app.include_router(suppliers_router)
app.include_router(invoices_router)
app.include_router(purchases_router)
app.include_router(sales_reports_router)
app.include_router(purchases_reports_router)
app.include_router(financial_reports_router)
app.include_router(inventory_reports_router)

# Create database tables (only for development - use migrations in production)
if settings.ENVIRONMENT == "development":
    Base.metadata.create_all(bind=sync_engine)


@app.get("/")
async def read_root():
    return {
        "message": "Billing Ledger API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}

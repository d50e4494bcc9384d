"""
Kamioun Marketplace - Backend API
B2B marketplace for retailers: catalog, reservations, orders and purchasing
"""
import logging
import time
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kamioun.api import (
    auth,
    banners,
    brands,
    cart,
    catalog,
    customers,
    favorites,
    orders,
    partners,
    products,
    purchases,
    reservations,
    suppliers,
)
from kamioun.core.config import settings
from kamioun.core.database import check_database_connection
from kamioun.core.errors import setup_exception_handlers
from kamioun.core.metrics import PrometheusMiddleware, render_metrics

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = settings.get_allowed_origins()

# Create FastAPI application
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
)

app.add_middleware(PrometheusMiddleware)

# CORS is added last so preflights are answered before anything else runs
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials="*" not in ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Include API routers
app.include_router(auth.router)
app.include_router(customers.router)
app.include_router(products.router)
app.include_router(brands.router)
app.include_router(catalog.router)
app.include_router(partners.router)
app.include_router(suppliers.router)
app.include_router(favorites.router)
app.include_router(banners.router)
app.include_router(cart.router)
app.include_router(reservations.router)
app.include_router(orders.router)
app.include_router(purchases.router)


@app.get("/")
async def root():
    """Root endpoint - API status"""
    return {
        "message": "Kamioun Marketplace API",
        "status": "online",
        "version": settings.API_VERSION,
    }


@app.get("/health")
def health():
    """Health check endpoint for monitoring - tests database connectivity"""
    start_time = time.time()

    db_latency_ms = None
    db_error = None
    try:
        db_latency_ms = check_database_connection(max_retries=1, retry_delay=0.5)
        db_status = "connected"
    except Exception as e:
        logger.warning(f"Health check database failure: {e}")
        db_status = "disconnected"
        db_error = str(e)

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "service": "kamioun-api",
        "version": settings.API_VERSION,
        "database": {
            "status": db_status,
            "latency_ms": db_latency_ms,
            "error": db_error,
        },
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
    }


@app.get(settings.PROMETHEUS_ENDPOINT, include_in_schema=False)
def metrics():
    """Prometheus metrics in text exposition format"""
    return render_metrics()

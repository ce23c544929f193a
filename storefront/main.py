"""
TechTots - Backend API
Storefront and back-office service for the TechTots STEM toys shop
"""
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables before settings are read
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from storefront.api import (
    account,
    admin_analytics,
    admin_customers,
    admin_email_templates,
    admin_orders,
    admin_products,
    admin_suppliers,
    admin_tickets,
    auth,
    cart,
    checkout,
    products,
    store_settings,
    supplier_portal,
)
from storefront.core.auth import hash_password
from storefront.core.config import settings
from storefront.core.database import SessionLocal, check_connection, init_db
from storefront.core.exceptions import StorefrontError
from storefront.domain.enums import Role
from storefront.repositories.customer_repository import CustomerRepository

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


def seed_admin(db: Session, email: Optional[str] = None, password: Optional[str] = None,
               name: Optional[str] = None):
    """
    Create the bootstrap ADMIN account from ADMIN_EMAIL / ADMIN_PASSWORD

    Does nothing when the credentials are unset or the email already exists.
    """
    email = email or settings.ADMIN_EMAIL
    password = password or settings.ADMIN_PASSWORD
    if not email or not password:
        return None

    repo = CustomerRepository(db)
    if repo.find_by_email(email):
        return None

    user = repo.create(
        name=name or settings.ADMIN_NAME,
        email=email,
        password_hash=hash_password(password),
        role=Role.ADMIN.value,
    )
    logger.info(f"Seeded admin user {user.email}")
    return user


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()
    yield


# Create FastAPI application
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    debug=settings.API_DEBUG,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": errors})


# Include API routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
app.include_router(cart.router, prefix="/api/v1/cart", tags=["Cart"])
app.include_router(checkout.router, prefix="/api/v1/checkout", tags=["Checkout"])
app.include_router(account.router, prefix="/api/v1/account", tags=["Account"])
app.include_router(supplier_portal.router, prefix="/api/v1/supplier", tags=["Supplier Portal"])
app.include_router(store_settings.public_router, prefix="/api/v1/settings", tags=["Settings"])

app.include_router(admin_customers.router, prefix="/api/v1/admin/customers", tags=["Admin Customers"])
app.include_router(admin_orders.router, prefix="/api/v1/admin/orders", tags=["Admin Orders"])
app.include_router(admin_products.router, prefix="/api/v1/admin/products", tags=["Admin Products"])
app.include_router(admin_email_templates.router, prefix="/api/v1/admin/email-templates", tags=["Admin Email Templates"])
app.include_router(admin_suppliers.router, prefix="/api/v1/admin/suppliers", tags=["Admin Suppliers"])
app.include_router(admin_tickets.router, prefix="/api/v1/admin/tickets", tags=["Admin Tickets"])
app.include_router(store_settings.admin_router, prefix="/api/v1/admin/settings", tags=["Admin Settings"])
app.include_router(admin_analytics.router, prefix="/api/v1/admin", tags=["Admin Analytics"])


@app.get("/")
async def root():
    """Root endpoint - API status"""
    return {
        "message": "TechTots API",
        "status": "online",
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION
    }


@app.get("/health")
async def health():
    """Health check endpoint for monitoring - tests database connectivity"""
    start_time = time.time()

    db_status = "unknown"
    db_latency_ms = None
    db_error = None

    try:
        db_latency_ms = check_connection()
        db_status = "connected"
    except Exception as e:
        logger.warning(f"Health check database query failed: {e}")
        db_status = "disconnected"
        db_error = str(e)

    total_latency_ms = round((time.time() - start_time) * 1000, 2)

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "service": "techtots-api",
        "version": settings.API_VERSION,
        "database": {
            "status": db_status,
            "latency_ms": db_latency_ms,
            "error": db_error
        },
        "total_latency_ms": total_latency_ms
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("storefront.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.API_DEBUG)

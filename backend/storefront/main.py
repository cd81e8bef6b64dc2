"""
Storefront Platform - Backend API
Stores, catalog, checkout and promotions for link-in-bio storefronts
"""
import logging
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api import (
    analytics,
    attributes,
    catalog,
    categories,
    delivery,
    orders,
    print_settings,
    printing,
    products,
    promotions,
    stores,
    uploads,
)
from storefront.core.config import settings
from storefront.core.database import ping_database
from storefront.core.rate_limit import RateLimitMiddleware

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION
)

app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)


# ============================================================================
# Error responses: every failure is rendered as {"error": "<message>"}
# ============================================================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid data"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"}
    )


ROUTERS = (
    (stores.router, "Stores"),
    (products.router, "Products"),
    (categories.router, "Product Categories"),
    (catalog.router, "Catalog"),
    (attributes.router, "Attributes"),
    (orders.router, "Orders"),
    (promotions.router, "Promotions"),
    (delivery.router, "Delivery"),
    (print_settings.router, "Print Settings"),
    (printing.router, "Printing"),
    (analytics.router, "Analytics"),
    (uploads.router, "Uploads"),
)

for router, tag in ROUTERS:
    app.include_router(router, prefix=API_PREFIX, tags=[tag])


@app.get("/")
async def root():
    return {
        "message": "Storefront API",
        "status": "online",
        "version": settings.API_VERSION
    }


@app.get("/health")
async def health():
    """Liveness plus database reachability; never fails, reports "degraded" instead"""
    database = {"status": "connected", "latency_ms": None, "error": None}
    try:
        database["latency_ms"] = ping_database()
    except Exception as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database.update(status="disconnected", error=str(e))

    return {
        "status": "healthy" if database["status"] == "connected" else "degraded",
        "service": "storefront-api",
        "version": settings.API_VERSION,
        "database": database,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("storefront.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.API_DEBUG)

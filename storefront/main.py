from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from contextlib import asynccontextmanager
import logging

from storefront.config import settings
from storefront.db.database import init_db, SessionLocal
from storefront.exceptions import ServiceError
from storefront.api import health, auth, users, products, categories, purchases, reviews, wishlist, statistics
from storefront.api.health import SERVICE_VERSION
from storefront.statistics.backends import create_cache_backend
from storefront.statistics.cache import StatisticsCache
from storefront.statistics.service import StatisticsService

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    await init_db()

    cache_backend = create_cache_backend(settings.redis_url)
    app.state.statistics_service = StatisticsService(
        session_factory=SessionLocal,
        cache=StatisticsCache(cache_backend)
    )

    logger.info(f"{settings.app_name} started successfully")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await cache_backend.close()


app = FastAPI(
    title="Storefront API",
    description="""
    Catalog and e-commerce backend.

    **Features:**
    - Users, products, categories
    - Purchases with price snapshots
    - Product reviews with running average ratings
    - Wishlists
    - Cached platform statistics

    **Authentication:**
    Register or log in via `/auth` to obtain a token, then include it in the Authorization header:
    ```
    Authorization: Bearer <your-jwt-token>
    ```
    """,
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
    max_age=3600,
)


def custom_openapi():
    """Custom OpenAPI schema with JWT Bearer authentication"""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Access token from /auth/login or /auth/register. Format: Bearer <token>"
        }
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    """Map domain errors to their HTTP status"""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message}
    )


# Global exception handler for unhandled exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them properly"""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error_type": type(exc).__name__,
        }
    )


# Validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    logger.warning(
        f"Validation error: {exc.errors()}",
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())}
    )


# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(wishlist.router)
app.include_router(wishlist.admin_router)
app.include_router(products.router)
app.include_router(categories.router)
app.include_router(purchases.router)
app.include_router(reviews.router)
app.include_router(reviews.admin_router)
app.include_router(statistics.router)


@app.get("/")
async def root():
    return {"service": settings.app_name, "version": SERVICE_VERSION}

"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pricefolio.config.settings import get_settings
from pricefolio.config.logging_config import setup_logging
from pricefolio.repositories.sqlalchemy.database import init_db
from pricefolio.api.deps import reset_price_cache
from pricefolio.api.routers import prices_router, holdings_router, analytics_router
from pricefolio.core.exceptions import AppError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()
    reset_price_cache()
    yield
    # Shutdown
    reset_price_cache()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Price resolution and portfolio analytics",
    version=settings.app_version,
    lifespan=lifespan,
)

# Include routers
app.include_router(prices_router)
app.include_router(holdings_router)
app.include_router(analytics_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=400,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }

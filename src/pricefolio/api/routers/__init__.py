"""API routers package."""

from pricefolio.api.routers.prices import router as prices_router
from pricefolio.api.routers.holdings import router as holdings_router
from pricefolio.api.routers.analytics import router as analytics_router

__all__ = [
    "prices_router",
    "holdings_router",
    "analytics_router",
]

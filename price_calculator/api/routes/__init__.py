"""API routers."""

from price_calculator.api.routes.pricing import router as pricing_router

__all__ = ["pricing_router"]

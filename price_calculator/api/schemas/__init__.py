"""Pydantic schemas for API responses."""

from price_calculator.api.schemas.pricing import MessageResponse, PriceResponse

__all__ = ["MessageResponse", "PriceResponse"]

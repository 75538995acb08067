"""Pricing domain: configuration storage and price computation."""

from price_calculator.pricing.engine import compute_total, parse_price_value
from price_calculator.pricing.models import PriceRequest
from price_calculator.pricing.store import ConfigStore

__all__ = ["ConfigStore", "PriceRequest", "compute_total", "parse_price_value"]

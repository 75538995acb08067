"""Thread-safe in-memory store for the pricing configuration.

The store owns the single ``(base_price, tax_rate)`` pair of the process.
Every read and write takes the same lock, so a reader never observes a value
that is being written and concurrent writers are serialized (last write
wins). The lock is held only for the duration of an attribute access and
never across an ``await``.
"""

import threading

from price_calculator.pricing.models import PriceRequest


class ConfigStore:
    """Holds the current base price and tax rate.

    Both values start at zero. Values are stored as given: the store does
    not validate or clamp them.

    Args:
        base_price: Initial base price.
        tax_rate: Initial tax rate, as a percentage.
    """

    def __init__(self, base_price: float = 0.0, tax_rate: float = 0.0) -> None:
        self._lock = threading.Lock()
        self._base_price = base_price
        self._tax_rate = tax_rate

    def get(self) -> PriceRequest:
        """Return a consistent snapshot of the current configuration."""
        with self._lock:
            return PriceRequest(base_price=self._base_price, tax_rate=self._tax_rate)

    def set_base_price(self, value: float) -> None:
        """Replace the base price."""
        with self._lock:
            self._base_price = value

    def set_tax_rate(self, value: float) -> None:
        """Replace the tax rate."""
        with self._lock:
            self._tax_rate = value

    def __repr__(self) -> str:
        snapshot = self.get()
        return (
            f"ConfigStore(base_price={snapshot.base_price}, "
            f"tax_rate={snapshot.tax_rate})"
        )

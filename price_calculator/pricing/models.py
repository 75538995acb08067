"""Value types of the pricing domain."""

from typing import NamedTuple


class PriceRequest(NamedTuple):
    """Inputs of a price calculation, taken from the stored configuration.

    Unpacks as ``base_price, tax_rate``.
    """

    base_price: float
    tax_rate: float

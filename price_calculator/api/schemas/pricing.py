"""Response schemas of the pricing endpoints."""

from pydantic import BaseModel, Field


class PriceResponse(BaseModel):
    """Result of a price calculation."""

    total_price: float = Field(
        ...,
        description="Base price plus tax: base_price + base_price * tax_rate / 100",
        examples=[120.0],
    )


class MessageResponse(BaseModel):
    """Confirmation returned by the configuration setters."""

    message: str = Field(
        ...,
        description="Human-readable confirmation",
        examples=["Base price set", "Tax rate set"],
    )

"""Pricing endpoints: compute the total price and update its inputs.

Each handler reports its work as a span named after the operation. The
compute endpoint never reads the request body; it always prices the
configuration currently held by the store.
"""

import asyncio

from fastapi import APIRouter
from loguru import logger

from price_calculator.api.constants import (
    BASE_PRICE_SET_MESSAGE,
    MILLISECONDS_PER_SECOND,
    SPAN_CALCULATE_PRICE,
    SPAN_CALCULATE_TOTAL_PRICE,
    SPAN_SET_BASE_PRICE,
    SPAN_SET_TAX_RATE,
    TAX_RATE_SET_MESSAGE,
)
from price_calculator.api.dependencies import (
    AppSettingsDep,
    ConfigStoreDep,
    SpanReporterDep,
)
from price_calculator.api.schemas.pricing import MessageResponse, PriceResponse
from price_calculator.api.utils.responses import ORJSONResponse
from price_calculator.pricing.engine import compute_total, parse_price_value

router = APIRouter(tags=["pricing"])

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    400: {"description": "The value is not a number", "content": {"text/plain": {}}},
    500: {"description": "The response could not be encoded"},
}


@router.post(
    "/calculate",
    response_model=PriceResponse,
    responses={500: _ERROR_RESPONSES[500]},
)
async def calculate_price(
    store: ConfigStoreDep,
    reporter: SpanReporterDep,
    settings: AppSettingsDep,
) -> ORJSONResponse:
    """Compute the total price from the stored base price and tax rate.

    Any request body is ignored.
    """
    delay_seconds = (
        settings.pricing_config.calculation_delay_ms / MILLISECONDS_PER_SECOND
    )

    with reporter.span(SPAN_CALCULATE_PRICE):
        base_price, tax_rate = store.get()

        with reporter.span(
            SPAN_CALCULATE_TOTAL_PRICE,
            **{"price.base_price": base_price, "price.tax_rate": tax_rate},
        ) as span:
            if delay_seconds:
                await asyncio.sleep(delay_seconds)
            total_price = compute_total(base_price, tax_rate)
            span.set_attribute("price.total_price", total_price)

        response = ORJSONResponse(
            content=PriceResponse(total_price=total_price).model_dump()
        )

    logger.info("Calculated total price: {}", total_price, total_price=total_price)
    return response


@router.post(
    "/setBasePrice/{value}",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
)
async def set_base_price(
    value: str,
    store: ConfigStoreDep,
    reporter: SpanReporterDep,
) -> ORJSONResponse:
    """Replace the stored base price with the number given in the path."""
    with reporter.span(SPAN_SET_BASE_PRICE) as span:
        base_price = parse_price_value(value, "base price")
        span.set_attribute("price.base_price", base_price)
        store.set_base_price(base_price)
        response = ORJSONResponse(
            content=MessageResponse(message=BASE_PRICE_SET_MESSAGE).model_dump()
        )

    logger.info("Base price set to: {}", base_price, base_price=base_price)
    return response


@router.post(
    "/setTaxRate/{value}",
    response_model=MessageResponse,
    responses=_ERROR_RESPONSES,
)
async def set_tax_rate(
    value: str,
    store: ConfigStoreDep,
    reporter: SpanReporterDep,
) -> ORJSONResponse:
    """Replace the stored tax rate with the percentage given in the path."""
    with reporter.span(SPAN_SET_TAX_RATE) as span:
        tax_rate = parse_price_value(value, "tax rate")
        span.set_attribute("price.tax_rate", tax_rate)
        store.set_tax_rate(tax_rate)
        response = ORJSONResponse(
            content=MessageResponse(message=TAX_RATE_SET_MESSAGE).model_dump()
        )

    logger.info("Tax rate set to: {}", tax_rate, tax_rate=tax_rate)
    return response

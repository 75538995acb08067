"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Plain-text error bodies
INTERNAL_SERVER_ERROR_MESSAGE = "Internal server error"

# Span names reported by the pricing handlers
SPAN_CALCULATE_PRICE = "CalculatePrice"
SPAN_CALCULATE_TOTAL_PRICE = "CalculateTotalPrice"
SPAN_SET_BASE_PRICE = "SetBasePrice"
SPAN_SET_TAX_RATE = "SetTaxRate"

# Confirmation messages
BASE_PRICE_SET_MESSAGE = "Base price set"
TAX_RATE_SET_MESSAGE = "Tax rate set"

MILLISECONDS_PER_SECOND = 1000

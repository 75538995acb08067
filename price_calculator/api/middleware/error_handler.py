"""Global exception handlers for the FastAPI application.

Every error response of the service is a short plain-text body. The status
code is derived from the exception type:

- ``ValidationError`` -> 400
- ``ResponseEncodingError`` and other ``PriceCalculatorError`` -> 500
- Starlette ``HTTPException`` (unknown route, wrong method) -> its own status
- anything else -> 500
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse, Response
from loguru import logger
from starlette.exceptions import HTTPException

from price_calculator.api.constants import INTERNAL_SERVER_ERROR_MESSAGE
from price_calculator.core.context import RequestContext
from price_calculator.core.exceptions import (
    ErrorCode,
    PriceCalculatorError,
    ValidationError,
)


async def price_calculator_error_handler(request: Request, exc: Exception) -> Response:
    """Handle PriceCalculatorError exceptions.

    Client errors answer with the exception message. Server-side errors hide
    their details behind a generic message.

    Args:
        request: The FastAPI request that caused the exception
        exc: The PriceCalculatorError exception to handle

    Returns:
        Response: Plain-text response with the mapped status code

    Raises:
        TypeError: If exc is not a PriceCalculatorError instance
    """
    if not isinstance(exc, PriceCalculatorError):
        raise TypeError(f"Expected PriceCalculatorError, got {type(exc).__name__}")

    log_context = {
        "request_method": request.method,
        "request_path": str(request.url.path),
        "error_code": exc.error_code,
        "severity": exc.severity.value,
        "correlation_id": RequestContext.get_correlation_id(),
        **exc.context,
    }

    if isinstance(exc, ValidationError):
        logger.warning(
            "{message}",
            message=exc.message,
            **log_context,
        )
        return PlainTextResponse(exc.message, status_code=status.HTTP_400_BAD_REQUEST)

    log_method = logger.warning if exc.is_expected else logger.error
    log_method(
        "Handling {exception_type}: {message}",
        exception_type=type(exc).__name__,
        message=exc.message,
        **log_context,
    )
    return PlainTextResponse(
        INTERNAL_SERVER_ERROR_MESSAGE,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException (404, 405, ...).

    Args:
        request: The FastAPI request that caused the exception
        exc: The HTTPException to handle

    Returns:
        Response: Plain-text response with the exception's status code

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    error_code = (
        ErrorCode.NOT_FOUND.value
        if exc.status_code == status.HTTP_404_NOT_FOUND
        else ErrorCode.INTERNAL_ERROR.value
    )
    logger.warning(
        "HTTP exception",
        status=exc.status_code,
        method=request.method,
        path=str(request.url.path),
        detail=exc.detail,
        error_code=error_code,
        correlation_id=RequestContext.get_correlation_id(),
    )
    return PlainTextResponse(
        str(exc.detail),
        status_code=exc.status_code,
        headers=exc.headers,
    )


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions.

    Args:
        request: The FastAPI request that caused the exception
        exc: The RequestValidationError exception to handle

    Returns:
        Response: Plain-text 400 response

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    logger.warning(
        "Request validation failed",
        method=request.method,
        path=str(request.url.path),
        validation_errors=[error.get("msg") for error in exc.errors()],
        correlation_id=RequestContext.get_correlation_id(),
    )
    return PlainTextResponse(
        "Invalid request", status_code=status.HTTP_400_BAD_REQUEST
    )


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle exceptions no other handler claimed.

    Args:
        request: The FastAPI request that caused the exception
        exc: The unhandled exception

    Returns:
        Response: Plain-text 500 response
    """
    logger.opt(exception=exc).error(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        request_method=request.method,
        request_path=str(request.url.path),
        correlation_id=RequestContext.get_correlation_id(),
    )
    return PlainTextResponse(
        INTERNAL_SERVER_ERROR_MESSAGE,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(PriceCalculatorError, price_calculator_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")

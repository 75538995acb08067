"""FastAPI middleware and exception handlers.

- **RequestContextMiddleware**: Correlation IDs for logs and traces
- **RequestLoggingMiddleware**: Request logging with timing
- **error_handler**: Exception-to-status mapping with plain-text bodies

Middleware run in reverse order of registration: request context first,
then request logging.
"""

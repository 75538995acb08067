"""JSON response class using orjson serialization.

``ORJSONResponse`` is the default response class of the application. It is
stricter than the standard library encoder in one respect: NaN and infinite
floats have no JSON representation, so instead of silently writing ``null``
the response refuses to render and raises ``ResponseEncodingError``.
"""

import math
from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from price_calculator.core.exceptions import ResponseEncodingError


def _find_non_finite(content: Any, path: str = "$") -> str | None:  # noqa: ANN401
    """Return the JSON path of the first NaN or infinite float, if any."""
    if isinstance(content, float) and not math.isfinite(content):
        return path
    if isinstance(content, dict):
        for key, value in content.items():
            if found := _find_non_finite(value, f"{path}.{key}"):
                return found
    elif isinstance(content, list | tuple):
        for index, value in enumerate(content):
            if found := _find_non_finite(value, f"{path}[{index}]"):
                return found
    return None


class ORJSONResponse(JSONResponse):
    """FastAPI Response class using orjson for JSON serialization.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.

        Raises:
            ResponseEncodingError: If the content holds a non-finite float or
                a value orjson cannot serialize.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump()

        if path := _find_non_finite(content):
            msg = f"Cannot encode non-finite number at {path}"
            raise ResponseEncodingError(msg, context={"path": path})

        try:
            return orjson.dumps(content, option=orjson.OPT_SORT_KEYS)
        except orjson.JSONEncodeError as exc:
            raise ResponseEncodingError(
                "Cannot encode response payload", cause=exc
            ) from exc

"""API middleware."""

from .request_id import (
    RequestIDMiddleware,
    RequestIDLogFilter,
    get_request_id,
    generate_request_id,
    REQUEST_ID_HEADER,
)

__all__ = [
    "RequestIDMiddleware",
    "RequestIDLogFilter",
    "get_request_id",
    "generate_request_id",
    "REQUEST_ID_HEADER",
]

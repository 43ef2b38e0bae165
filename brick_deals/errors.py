"""Domain exceptions and the safe messages they map to."""

from __future__ import annotations


class BrickDealsError(Exception):
    """Base class for errors raised by the deal pipeline."""

    status_code: int = 500
    public_message: str = "Internal error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.public_message)
        self.detail = detail or self.public_message


class ValidationError(BrickDealsError):
    """Malformed token, set number or missing field."""

    status_code = 400
    public_message = "Invalid request"


class NotFoundError(BrickDealsError):
    status_code = 404
    public_message = "Not found"


class RateLimitExceeded(BrickDealsError):
    status_code = 429
    public_message = "Too many requests"


class Unauthorized(BrickDealsError):
    status_code = 401
    public_message = "Unauthorized"


class UpstreamFetchError(BrickDealsError):
    """External catalog or push gateway returned non-2xx or was unreachable."""

    status_code = 502
    public_message = "Upstream service unavailable"


class PersistenceError(BrickDealsError):
    """A batched write to the store failed; earlier batches remain committed."""

    public_message = "Storage failure"

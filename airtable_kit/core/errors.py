"""
Error taxonomy and HTTP outcome classification.

Every failure surfaced by the SDK is an AirtableError subclass, so callers
can catch the base class or a specific case.
"""

import json
from typing import Any


class AirtableError(Exception):
    """Base error class for SDK errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message, "type": type(self).__name__}
        if self.details:
            result["details"] = self.details
        return result


class InvalidParametersError(AirtableError):
    """Caller misuse detected before any request is sent."""


class EncodingError(AirtableError):
    """Request payload cannot be represented as JSON."""


class DecodingError(AirtableError):
    """Response body does not match the expected shape."""


class NetworkError(AirtableError):
    """Transport failure: no response was received."""

    def __init__(self, underlying: BaseException):
        super().__init__(f"Connection error: {underlying}")
        self.underlying = underlying


class APIError(AirtableError):
    """API error with status code and message."""

    def __init__(self, message: str, status: int = 0, details: dict | None = None):
        super().__init__(message, details)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class NotFoundError(APIError):
    """The table or record does not exist (404)."""


class AuthenticationError(APIError):
    """The API key is missing, invalid or lacks permission (401/403)."""


class InvalidRequestError(APIError):
    """The server rejected the request (400/422)."""

    def __init__(self, server_message: str | None, status: int, details: dict | None = None):
        super().__init__(server_message or f"Invalid request (HTTP {status})", status, details)
        self.server_message = server_message


class UnexpectedStatusError(APIError):
    """Any other non-2xx response."""

    def __init__(self, status: int, body: bytes):
        super().__init__(f"Unexpected HTTP status {status}", status)
        self.body = body


# =============================================================================
# Outcome classification
# =============================================================================


def parse_error_body(body: bytes | None) -> tuple[str | None, dict | None]:
    """
    Extract the server message from an error body.

    Handles both {"error": "NOT_FOUND"} and
    {"error": {"type": "...", "message": "..."}}.

    Returns:
        (message, parsed body) - either may be None

    """
    if not body:
        return None, None
    try:
        error_data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None, None
    if not isinstance(error_data, dict):
        return None, None

    error_field = error_data.get("error")
    if isinstance(error_field, str):
        message = error_field
    elif isinstance(error_field, dict):
        message = error_field.get("message") or error_field.get("type")
    else:
        message = None
    return message, error_data


class ErrorHandler:
    """Maps a transport outcome to response bytes or a typed error."""

    def map_response(
        self,
        status: int | None,
        body: bytes | None,
        error: BaseException | None = None,
    ) -> bytes:
        """
        Classify the outcome of one HTTP exchange.

        Args:
            status: HTTP status code, None when no response was received
            body: Raw response body
            error: Transport-level failure raised before any response

        Returns:
            The body, unchanged, for 2xx responses

        Raises:
            NetworkError: On transport failure
            NotFoundError: On 404
            AuthenticationError: On 401/403
            InvalidRequestError: On 400/422
            UnexpectedStatusError: On any other non-2xx status

        """
        if error is not None:
            raise NetworkError(error) from error
        if status is None:
            raise NetworkError(ConnectionError("No response received"))

        body = body or b""
        if 200 <= status < 300:
            return body

        if status == 404:
            raise NotFoundError("Record or table not found", status=status)
        if status in (401, 403):
            message, details = parse_error_body(body)
            raise AuthenticationError(message or "Authentication failed", status=status, details=details)
        if status in (400, 422):
            message, details = parse_error_body(body)
            raise InvalidRequestError(message, status=status, details=details)
        raise UnexpectedStatusError(status, body)

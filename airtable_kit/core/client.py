"""
Core HTTP client for the Airtable API.

Handles configuration, request building, transport invocation and error
mapping. Decoding is delegated to the decoder passed by the caller.
"""

import http.client
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from airtable_kit.core.encoder import RequestEncoder
from airtable_kit.core.errors import ErrorHandler, InvalidParametersError
from airtable_kit.core.types import JSONValue

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "https://api.airtable.com/v0"
DEFAULT_TIMEOUT = 60

T = TypeVar("T")

QueryItems = Sequence[tuple[str, str]]


@dataclass(frozen=True)
class AirtableConfig:
    """Immutable client configuration."""

    base_id: str
    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL

    @classmethod
    def from_env(
        cls,
        base_id: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
    ) -> "AirtableConfig":
        """
        Build a config, falling back to environment variables.

        Args:
            base_id: Base ID (or AIRTABLE_BASE_ID env var)
            api_key: API key (or AIRTABLE_API_KEY env var)
            base_url: API base URL (or AIRTABLE_BASE_URL env var)

        Raises:
            InvalidParametersError: If the base ID or API key is missing

        """
        api_key = api_key or os.environ.get("AIRTABLE_API_KEY")
        if not api_key:
            raise InvalidParametersError("AIRTABLE_API_KEY environment variable not set")
        base_id = base_id or os.environ.get("AIRTABLE_BASE_ID")
        if not base_id:
            raise InvalidParametersError("Base ID required. Set AIRTABLE_BASE_ID env var or use --base flag")
        env_base_url = os.environ.get("AIRTABLE_BASE_URL", DEFAULT_BASE_URL)
        return cls(base_id=base_id, api_key=api_key, base_url=(base_url or env_base_url).rstrip("/"))


# =============================================================================
# Transport
# =============================================================================


@dataclass(frozen=True)
class HTTPRequest:
    """A fully built request, ready to send."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


@dataclass(frozen=True)
class HTTPResponse:
    """Status and raw body of a received response."""

    status: int
    body: bytes = b""


class Transport(Protocol):
    """
    Sends one request and returns the response.

    Any status code, including 4xx/5xx, is a response. Implementations raise
    OSError (or a subclass) when no response could be obtained.
    """

    def send(self, request: HTTPRequest) -> HTTPResponse: ...


class UrllibTransport:
    """Default transport built on urllib."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def send(self, request: HTTPRequest) -> HTTPResponse:
        """
        Send the request and return its status and body.

        Raises:
            OSError: If no complete response was received. Malformed or
                truncated responses are reported as ConnectionError.

        """
        req = urllib.request.Request(
            request.url,
            data=request.body,
            headers=request.headers,
            method=request.method,
        )
        try:
            try:
                with urllib.request.urlopen(req, timeout=self.timeout) as response:
                    return HTTPResponse(status=response.status, body=response.read())
            except urllib.error.HTTPError as e:
                # Non-2xx statuses are responses, not transport failures
                try:
                    return HTTPResponse(status=e.code, body=e.read())
                finally:
                    e.close()
        except http.client.HTTPException as e:
            raise ConnectionError(f"Invalid HTTP response: {e!r}") from e


# =============================================================================
# Client
# =============================================================================


class APIClient:
    """
    Low-level HTTP client for the Airtable API.

    Handles:
    - Bearer authentication
    - URL and query string building
    - JSON body encoding
    - Error mapping of every response
    """

    def __init__(
        self,
        config: AirtableConfig,
        transport: Transport | None = None,
        encoder: RequestEncoder | None = None,
        error_handler: ErrorHandler | None = None,
    ):
        self.config = config
        self.transport = transport or UrllibTransport()
        self.encoder = encoder or RequestEncoder()
        self.error_handler = error_handler or ErrorHandler()

    def _base_path(self) -> str:
        """Get the URL of the configured base."""
        parts = urllib.parse.urlsplit(self.config.base_url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise InvalidParametersError(
                f"Invalid base URL: {self.config.base_url!r}",
                details={"base_url": self.config.base_url},
            )
        return f"{self.config.base_url.rstrip('/')}/{urllib.parse.quote(self.config.base_id, safe='')}"

    def build_url(self, table: str, record_id: str | None = None, query: QueryItems | None = None) -> str:
        """
        Build the full URL for a table or one of its records.

        Args:
            table: Table name or ID
            record_id: Record ID when addressing a single record
            query: Query parameters as (name, value) pairs; names may repeat

        Raises:
            InvalidParametersError: If a segment is empty or the base URL is invalid

        """
        if not table:
            raise InvalidParametersError("Table name required")
        segments = [table]
        if record_id is not None:
            if not record_id:
                raise InvalidParametersError("Record ID required", details={"table": table})
            segments.append(record_id)

        url = "/".join([self._base_path(), *(urllib.parse.quote(s, safe="") for s in segments)])
        if query:
            url = f"{url}?{urllib.parse.urlencode(list(query))}"
        return url

    def build_request(
        self,
        method: str,
        table: str,
        record_id: str | None = None,
        query: QueryItems | None = None,
        payload: JSONValue | None = None,
    ) -> HTTPRequest:
        """
        Build an authenticated request.

        Args:
            method: HTTP method (GET, POST, PATCH, PUT, DELETE)
            table: Table name or ID
            record_id: Record ID when addressing a single record
            query: Query parameters as (name, value) pairs
            payload: JSON body, None for requests without a body

        Returns:
            HTTPRequest with Authorization header, and JSON body when a payload is given

        Raises:
            InvalidParametersError: If the URL cannot be built
            EncodingError: If the payload is not JSON-serializable

        """
        url = self.build_url(table, record_id, query)
        headers = {"Authorization": f"Bearer {self.config.api_key}"}

        body = None
        if payload is not None:
            body = self.encoder.serialize(payload)
            headers["Content-Type"] = "application/json"

        return HTTPRequest(method=method, url=url, headers=headers, body=body)

    def perform_request(self, request: HTTPRequest, decoder: Callable[[bytes], T]) -> T:
        """
        Send a request and decode its response.

        Args:
            request: The request to send
            decoder: Turns the body of a successful response into the result

        Returns:
            The decoded result

        Raises:
            NetworkError: If the transport failed
            APIError: On non-2xx responses
            DecodingError: If the body does not match the expected shape

        """
        logger.debug("%s %s", request.method, request.url)
        status: int | None = None
        body: bytes | None = None
        error: OSError | None = None
        try:
            response = self.transport.send(request)
        except OSError as e:
            logger.debug("%s %s failed: %s", request.method, request.url, e)
            error = e
        else:
            logger.debug("%s %s -> %s", request.method, request.url, response.status)
            status, body = response.status, response.body

        data = self.error_handler.map_response(status, body, error)
        return decoder(data)

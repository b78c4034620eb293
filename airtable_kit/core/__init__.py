"""
Core layer - Record types, codecs, errors and HTTP client.

This layer provides:
- Typed dataclasses for records and attachments
- Request encoder and response decoder
- Error taxonomy and HTTP outcome classification
- Low-level HTTP client with auth and a pluggable transport
"""

from airtable_kit.core.client import (
    AirtableConfig,
    APIClient,
    HTTPRequest,
    HTTPResponse,
    Transport,
    UrllibTransport,
)
from airtable_kit.core.decoder import ResponseDecoder, is_attachment_list
from airtable_kit.core.encoder import RequestEncoder
from airtable_kit.core.errors import (
    AirtableError,
    APIError,
    AuthenticationError,
    DecodingError,
    EncodingError,
    ErrorHandler,
    InvalidParametersError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    UnexpectedStatusError,
)
from airtable_kit.core.types import Attachment, JSONValue, Record, RecordPage

__all__ = [
    "APIClient",
    "APIError",
    "AirtableConfig",
    "AirtableError",
    "Attachment",
    "AuthenticationError",
    "DecodingError",
    "EncodingError",
    "ErrorHandler",
    "HTTPRequest",
    "HTTPResponse",
    "InvalidParametersError",
    "InvalidRequestError",
    "JSONValue",
    "NetworkError",
    "NotFoundError",
    "Record",
    "RecordPage",
    "RequestEncoder",
    "ResponseDecoder",
    "Transport",
    "UnexpectedStatusError",
    "UrllibTransport",
    "is_attachment_list",
]

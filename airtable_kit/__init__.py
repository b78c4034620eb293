"""
Airtable Kit - Client library for the Airtable REST API.

Layers:
- core: Record types, codecs, errors and HTTP client
- sdk: High-level Airtable client with batching and pagination
- cli: Command-line interface
"""

from airtable_kit.core import (
    AirtableError,
    APIError,
    Attachment,
    AuthenticationError,
    DecodingError,
    EncodingError,
    InvalidParametersError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    Record,
    RecordPage,
    UnexpectedStatusError,
)
from airtable_kit.sdk import Airtable

__version__ = "0.1.0"
__all__ = [
    "APIError",
    "Airtable",
    "AirtableError",
    "Attachment",
    "AuthenticationError",
    "DecodingError",
    "EncodingError",
    "InvalidParametersError",
    "InvalidRequestError",
    "NetworkError",
    "NotFoundError",
    "Record",
    "RecordPage",
    "UnexpectedStatusError",
]

"""
Core types for Airtable records.

These dataclasses are the values the SDK hands back from every operation.
Field values stay as plain JSON values; attachment fields are additionally
exposed as typed Attachment lists.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union

# =============================================================================
# Field Values
# =============================================================================


JSONValue = Union[str, int, float, bool, None, list["JSONValue"], dict[str, "JSONValue"]]

# Keys mapped onto Attachment attributes; anything else lands in `extra`
ATTACHMENT_METADATA_KEYS = ("filename", "type", "size")


def _metadata_type_ok(key: str, value: Any) -> bool:
    if key == "size":
        # bool is an int subclass
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, str)


# =============================================================================
# Attachment Types
# =============================================================================


@dataclass
class Attachment:
    """A file stored in an attachment field."""

    id: str
    url: str
    filename: str | None = None
    type: str | None = None
    size: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attachment":
        """
        Create from an attachment object of a field value.

        Metadata of an unexpected type is kept in `extra` rather than on
        the typed attribute.
        """
        extra = {k: v for k, v in data.items() if k not in ("id", "url", *ATTACHMENT_METADATA_KEYS)}
        metadata: dict[str, Any] = {}
        for key in ATTACHMENT_METADATA_KEYS:
            value = data.get(key)
            if value is None:
                continue
            if _metadata_type_ok(key, value):
                metadata[key] = value
            else:
                extra[key] = value
        return cls(id=data["id"], url=data["url"], extra=extra, **metadata)

    def to_dict(self) -> dict[str, Any]:
        """Convert back to the attachment object shape."""
        result: dict[str, Any] = {"id": self.id, "url": self.url}
        for key in ATTACHMENT_METADATA_KEYS:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        result.update(self.extra)
        return result


# =============================================================================
# Record Types
# =============================================================================


@dataclass
class Record:
    """
    A row of an Airtable table.

    Records built locally for creation have no `id`. Records returned by the
    API always carry `id`, and `created_time` unless they only confirm a
    deletion.

    `attachments` is a view over `fields`: every attachment field is still
    present, unchanged, in `fields`.
    """

    fields: dict[str, JSONValue] = field(default_factory=dict)
    id: str | None = None
    created_time: datetime | None = None
    attachments: dict[str, list[Attachment]] = field(default_factory=dict)

    @property
    def is_persisted(self) -> bool:
        """Check if the record exists on the server."""
        return self.id is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the API record shape."""
        result: dict[str, Any] = {}
        if self.id is not None:
            result["id"] = self.id
        if self.created_time is not None:
            result["createdTime"] = format_timestamp(self.created_time)
        result["fields"] = self.fields
        return result


# =============================================================================
# Pagination
# =============================================================================


@dataclass
class RecordPage:
    """One page of a list response."""

    records: list[Record]
    offset: str | None = None

    @property
    def has_more(self) -> bool:
        """Check if there are more pages."""
        return self.offset is not None


# =============================================================================
# Timestamps
# =============================================================================


def parse_timestamp(value: str) -> datetime:
    """Parse an API timestamp such as 2024-01-31T10:00:00.000Z."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def format_timestamp(value: datetime) -> str:
    """Format a timestamp the way the API does."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"

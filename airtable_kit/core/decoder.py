"""
Response body decoding.

Each decode mode matches one response shape of the API:

- single record:   {"id", "createdTime", "fields"}
- record list:     {"records": [...]}
- page:            {"records": [...], "offset"?}
- deletion:        {"id", "deleted": true}
- batch deletion:  {"records": [{"id", "deleted": true}, ...]}
"""

import json
from typing import Any

from airtable_kit.core.errors import DecodingError
from airtable_kit.core.types import Attachment, JSONValue, Record, RecordPage, parse_timestamp


def is_attachment_list(value: Any) -> bool:
    """
    Check whether a field value has the attachment shape.

    An attachment list is a non-empty list whose elements are all objects
    with an `id` string and a `url` string.
    """
    if not isinstance(value, list) or not value:
        return False
    return all(
        isinstance(item, dict) and isinstance(item.get("id"), str) and isinstance(item.get("url"), str)
        for item in value
    )


class ResponseDecoder:
    """Parses response bytes into Records."""

    def decode_json(self, data: bytes) -> JSONValue:
        """Parse raw bytes as JSON."""
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodingError(f"Invalid JSON response: {e}") from e

    def decode_record(self, data: bytes) -> Record:
        """Decode a single record response."""
        return self._record_from_object(self._expect_object(self.decode_json(data)))

    def decode_records(self, data: bytes) -> list[Record]:
        """Decode a {"records": [...]} response."""
        obj = self._expect_object(self.decode_json(data))
        return [self._record_from_object(item) for item in self._records_array(obj)]

    def decode_page(self, data: bytes) -> RecordPage:
        """Decode a list response with its continuation offset."""
        obj = self._expect_object(self.decode_json(data))
        records = [self._record_from_object(item) for item in self._records_array(obj)]

        offset = obj.get("offset")
        if offset is not None and not isinstance(offset, str):
            raise DecodingError("Expected 'offset' to be a string", details={"offset": offset})
        return RecordPage(records=records, offset=offset or None)

    def decode_deletion(self, data: bytes) -> Record:
        """Decode a single deletion confirmation."""
        return self._deleted_record(self._expect_object(self.decode_json(data)))

    def decode_batch_deletion(self, data: bytes) -> list[Record]:
        """Decode a batch deletion confirmation."""
        obj = self._expect_object(self.decode_json(data))
        return [self._deleted_record(item) for item in self._records_array(obj)]

    # =========================================================================
    # Shape helpers
    # =========================================================================

    def _expect_object(self, value: Any) -> dict[str, Any]:
        if not isinstance(value, dict):
            raise DecodingError(f"Expected a JSON object, got {type(value).__name__}")
        return value

    def _records_array(self, obj: dict[str, Any]) -> list[Any]:
        records = obj.get("records")
        if not isinstance(records, list):
            raise DecodingError("Expected a 'records' array", details={"keys": sorted(obj)})
        return records

    def _record_id(self, obj: Any) -> str:
        obj = self._expect_object(obj)
        record_id = obj.get("id")
        if not isinstance(record_id, str) or not record_id:
            raise DecodingError("Expected a record 'id' string", details={"keys": sorted(obj)})
        return record_id

    def _record_from_object(self, obj: Any) -> Record:
        record_id = self._record_id(obj)

        fields = obj.get("fields", {})
        if not isinstance(fields, dict):
            raise DecodingError(f"Expected 'fields' object on record {record_id}")

        created_time = None
        raw_time = obj.get("createdTime")
        if raw_time is not None:
            if not isinstance(raw_time, str):
                raise DecodingError(f"Expected 'createdTime' string on record {record_id}")
            try:
                created_time = parse_timestamp(raw_time)
            except ValueError as e:
                raise DecodingError(f"Invalid 'createdTime' on record {record_id}: {raw_time}") from e

        attachments = {
            name: [Attachment.from_dict(item) for item in value]
            for name, value in fields.items()
            if is_attachment_list(value)
        }

        return Record(fields=fields, id=record_id, created_time=created_time, attachments=attachments)

    def _deleted_record(self, obj: Any) -> Record:
        record_id = self._record_id(obj)
        if obj.get("deleted") is not True:
            raise DecodingError(f"Record {record_id} was not confirmed as deleted", details=obj)
        return Record(id=record_id)

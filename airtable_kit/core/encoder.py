"""
Request body encoding.

Turns Records into request payloads and payloads into JSON bytes.
"""

import json
import math
from collections.abc import Iterable
from typing import Any

from airtable_kit.core.errors import EncodingError
from airtable_kit.core.types import JSONValue, Record


class RequestEncoder:
    """Builds and serializes write payloads."""

    def encode_record(self, record: Record, include_id: bool) -> dict[str, Any]:
        """
        Encode a single record.

        Args:
            record: The record to encode
            include_id: Add the record ID (batch updates address rows by ID)

        Returns:
            {"fields": {...}} plus "id" when requested and available

        """
        payload: dict[str, Any] = {"fields": record.fields}
        if include_id and record.id is not None:
            payload["id"] = record.id
        return payload

    def encode_records(self, records: Iterable[Record], include_id: bool) -> dict[str, Any]:
        """Encode several records as {"records": [...]}."""
        return {"records": [self.encode_record(r, include_id) for r in records]}

    def serialize(self, value: JSONValue) -> bytes:
        """
        Serialize a JSON value to its canonical bytes.

        Key order is preserved and separators are compact.

        Raises:
            EncodingError: If the value contains non-JSON types

        """
        _check_json(value, "$")
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False).encode("utf-8")


def _check_json(value: Any, path: str) -> None:
    """Walk the value graph and reject anything json.dumps would coerce or refuse."""
    # bool is an int subclass, both are accepted as-is
    if value is None or isinstance(value, (str, bool, int)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise EncodingError(f"Non-finite number at {path}", details={"path": path})
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            _check_json(item, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise EncodingError(
                    f"Non-string key {key!r} at {path}",
                    details={"path": path, "key": repr(key)},
                )
            _check_json(item, f"{path}.{key}")
        return
    raise EncodingError(
        f"Value of type {type(value).__name__} at {path} is not JSON-serializable",
        details={"path": path, "type": type(value).__name__},
    )

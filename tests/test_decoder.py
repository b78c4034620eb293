"""Tests for response decoding and attachment detection."""

import json
from datetime import datetime, timezone

import pytest

from airtable_kit.core.decoder import ResponseDecoder, is_attachment_list
from airtable_kit.core.errors import DecodingError

decoder = ResponseDecoder()


def encode(data) -> bytes:
    return json.dumps(data).encode("utf-8")


# =============================================================================
# Attachment detection
# =============================================================================


def test_attachment_shape_detected():
    assert is_attachment_list([{"id": "att1", "url": "http://x/y"}])


def test_missing_id_or_url_is_not_attachment():
    assert not is_attachment_list([{"foo": "bar"}])
    assert not is_attachment_list([{"id": "att1"}])
    assert not is_attachment_list([{"url": "http://x/y"}])


def test_every_element_must_match():
    assert not is_attachment_list([{"id": "att1", "url": "http://x/y"}, {"foo": "bar"}])
    assert not is_attachment_list([{"id": "att1", "url": "http://x/y"}, "text"])


def test_non_string_id_or_url_is_not_attachment():
    assert not is_attachment_list([{"id": 1, "url": "http://x/y"}])
    assert not is_attachment_list([{"id": "att1", "url": None}])


@pytest.mark.parametrize("value", [[], "att1", {"id": "att1", "url": "http://x/y"}, None, 3])
def test_other_values_are_not_attachments(value):
    assert not is_attachment_list(value)


# =============================================================================
# Single record
# =============================================================================


def test_decode_record():
    record = decoder.decode_record(
        encode({"id": "rec1", "createdTime": "2024-01-31T10:00:00.000Z", "fields": {"Name": "John", "Age": 42}})
    )
    assert record.id == "rec1"
    assert record.created_time == datetime(2024, 1, 31, 10, 0, tzinfo=timezone.utc)
    assert record.fields == {"Name": "John", "Age": 42}
    assert record.attachments == {}


def test_decode_record_annotates_attachments_without_touching_fields():
    photos = [
        {"id": "att1", "url": "http://x/y.png", "filename": "y.png", "type": "image/png", "size": 1024, "width": 10},
        {"id": "att2", "url": "http://x/z.pdf"},
    ]
    record = decoder.decode_record(
        encode({"id": "rec1", "fields": {"Photos": photos, "Tags": [{"foo": "bar"}]}})
    )

    assert record.fields["Photos"] == photos
    assert record.fields["Tags"] == [{"foo": "bar"}]
    assert list(record.attachments) == ["Photos"]

    first, second = record.attachments["Photos"]
    assert (first.id, first.url, first.filename, first.type, first.size) == (
        "att1",
        "http://x/y.png",
        "y.png",
        "image/png",
        1024,
    )
    assert first.extra == {"width": 10}
    assert second.filename is None and second.size is None


@pytest.mark.parametrize("size", ["1024", True, 10.5])
def test_attachment_metadata_of_wrong_type_kept_in_extra(size):
    raw = {"id": "att1", "url": "http://x/y.png", "filename": 42, "size": size}
    record = decoder.decode_record(encode({"id": "rec1", "fields": {"Photos": [raw]}}))

    (attachment,) = record.attachments["Photos"]
    assert attachment.size is None
    assert attachment.filename is None
    assert attachment.extra == {"filename": 42, "size": size}
    assert attachment.to_dict() == raw


def test_decode_record_does_not_synthesize_missing_fields():
    record = decoder.decode_record(encode({"id": "rec1", "fields": {"Name": "John"}}))
    assert "Count" not in record.fields
    assert record.created_time is None


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        b"\xff\xfe",
        encode([]),
        encode({"fields": {}}),
        encode({"id": 12, "fields": {}}),
        encode({"id": "rec1", "fields": []}),
        encode({"id": "rec1", "createdTime": "yesterday", "fields": {}}),
    ],
)
def test_decode_record_rejects_bad_shapes(body):
    with pytest.raises(DecodingError):
        decoder.decode_record(body)


def test_decode_json_passes_through_objects():
    assert decoder.decode_json(encode({"key": "value"})) == {"key": "value"}


# =============================================================================
# Lists and pages
# =============================================================================


def test_decode_records():
    records = decoder.decode_records(
        encode({"records": [{"id": "rec1", "fields": {"n": 1}}, {"id": "rec2", "fields": {"n": 2}}]})
    )
    assert [r.id for r in records] == ["rec1", "rec2"]


def test_decode_records_requires_records_array():
    with pytest.raises(DecodingError):
        decoder.decode_records(encode({"id": "rec1", "fields": {}}))


def test_decode_page_with_offset():
    page = decoder.decode_page(encode({"records": [{"id": "rec1", "fields": {}}], "offset": "itr1/rec1"}))
    assert [r.id for r in page.records] == ["rec1"]
    assert page.offset == "itr1/rec1"
    assert page.has_more


def test_decode_last_page():
    page = decoder.decode_page(encode({"records": []}))
    assert page.records == []
    assert page.offset is None
    assert not page.has_more


def test_decode_page_rejects_non_string_offset():
    with pytest.raises(DecodingError):
        decoder.decode_page(encode({"records": [], "offset": 3}))


# =============================================================================
# Deletions
# =============================================================================


def test_decode_deletion():
    record = decoder.decode_deletion(encode({"id": "rec1", "deleted": True}))
    assert record.id == "rec1"
    assert record.fields == {}
    assert record.created_time is None


def test_decode_deletion_requires_confirmation():
    with pytest.raises(DecodingError):
        decoder.decode_deletion(encode({"id": "rec1", "deleted": False}))
    with pytest.raises(DecodingError):
        decoder.decode_deletion(encode({"id": "rec1"}))


def test_decode_batch_deletion():
    records = decoder.decode_batch_deletion(
        encode({"records": [{"id": "rec1", "deleted": True}, {"id": "rec2", "deleted": True}]})
    )
    assert [r.id for r in records] == ["rec1", "rec2"]
    assert all(r.fields == {} for r in records)

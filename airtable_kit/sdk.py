"""
Airtable SDK - High-level client with nice ergonomics.

This layer provides a clean, typed interface for record operations on a
base. Built on top of the core APIClient.
"""

import builtins
import logging
from collections.abc import Iterator, Sequence
from typing import TypeVar

from airtable_kit.core.client import AirtableConfig, APIClient, Transport, UrllibTransport
from airtable_kit.core.decoder import ResponseDecoder
from airtable_kit.core.encoder import RequestEncoder
from airtable_kit.core.errors import InvalidParametersError
from airtable_kit.core.types import Record, RecordPage

logger = logging.getLogger(__name__)

# Maximum number of records per batch request, fixed by the API
BATCH_LIMIT = 10
# Maximum page size accepted by the list endpoint
MAX_PAGE_SIZE = 100

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> list[Sequence[T]]:
    """Split items into consecutive chunks of at most `size` elements."""
    return [items[i : i + size] for i in range(0, len(items), size)]


class Airtable:
    """
    High-level Airtable client for one base.

    Example:
        client = Airtable(base_id="appXXXXXXXXXXXXXX", api_key="pat...")

        # Read
        records = client.list("Tasks", fields=["Name", "Status"], formula="{Status} = 'Open'")
        record = client.get("Tasks", "recXXXXXXXXXXXXXX")

        # Write
        created = client.create("Tasks", Record({"Name": "Write docs"}))
        created.fields["Status"] = "Done"
        client.update("Tasks", created)
        client.delete("Tasks", created.id)

    """

    def __init__(
        self,
        base_id: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: Transport | None = None,
        timeout: int = 60,
    ):
        """
        Initialize the Airtable client.

        Args:
            base_id: ID of the base to work on (or AIRTABLE_BASE_ID env var)
            api_key: API key or personal access token (or AIRTABLE_API_KEY env var)
            base_url: API base URL (or AIRTABLE_BASE_URL env var)
            transport: Object sending requests; defaults to a urllib transport
            timeout: Request timeout in seconds for the default transport

        """
        config = AirtableConfig.from_env(base_id=base_id, api_key=api_key, base_url=base_url)
        self._client = APIClient(config, transport=transport or UrllibTransport(timeout=timeout))
        self._encoder = RequestEncoder()
        self._decoder = ResponseDecoder()

    @property
    def config(self) -> AirtableConfig:
        """Get the client configuration."""
        return self._client.config

    @property
    def base_id(self) -> str:
        """Get the ID of the base manipulated by the client."""
        return self._client.config.base_id

    # =========================================================================
    # Read
    # =========================================================================

    def list_page(
        self,
        table: str,
        fields: Sequence[str] | None = None,
        formula: str | None = None,
        max_records: int | None = None,
        page_size: int = MAX_PAGE_SIZE,
        offset: str | None = None,
    ) -> RecordPage:
        """
        Fetch a single page of records.

        Args:
            table: Table name or ID
            fields: Only return these fields
            formula: filterByFormula expression
            max_records: Total number of records the server should return across pages
            page_size: Records per page (1-100)
            offset: Continuation token from a previous page

        Returns:
            RecordPage with records and the next offset, if any

        """
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise InvalidParametersError(
                f"page_size must be between 1 and {MAX_PAGE_SIZE}",
                details={"page_size": page_size},
            )
        if max_records is not None and max_records < 1:
            raise InvalidParametersError("max_records must be positive", details={"max_records": max_records})

        query: builtins.list[tuple[str, str]] = [("fields[]", name) for name in fields or ()]
        if max_records is not None:
            query.append(("maxRecords", str(max_records)))
        query.append(("pageSize", str(page_size)))
        if offset:
            query.append(("offset", offset))
        if formula:
            query.append(("filterByFormula", formula))

        request = self._client.build_request("GET", table, query=query)
        return self._client.perform_request(request, self._decoder.decode_page)

    def list(
        self,
        table: str,
        fields: Sequence[str] | None = None,
        formula: str | None = None,
        max_records: int = 100,
        page_size: int = MAX_PAGE_SIZE,
        offset: str | None = None,
    ) -> builtins.list[Record]:
        """
        List records of a table, following pagination.

        Pages are requested one after the other until the server stops
        returning an offset or `max_records` records have been collected.

        Args:
            table: Table name or ID
            fields: Only return these fields
            formula: filterByFormula expression
            max_records: Maximum total number of records returned
            page_size: Records per request (1-100)
            offset: Start from this continuation token

        Returns:
            Records in server order

        """
        results: builtins.list[Record] = []
        page_offset = offset
        pages = 0

        while True:
            page = self.list_page(
                table,
                fields=fields,
                formula=formula,
                max_records=max_records,
                page_size=page_size,
                offset=page_offset,
            )
            pages += 1
            results.extend(page.records)

            if len(results) >= max_records:
                del results[max_records:]
                break
            if not page.has_more:
                break
            page_offset = page.offset

        logger.info("Listed %d records from %s in %d page(s)", len(results), table, pages)
        return results

    def iterate(
        self,
        table: str,
        fields: Sequence[str] | None = None,
        formula: str | None = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> Iterator[Record]:
        """
        Iterate through every record of a table.

        Pages are fetched lazily as the iterator advances.

        Args:
            table: Table name or ID
            fields: Only return these fields
            formula: filterByFormula expression
            page_size: Records per request (1-100)

        Yields:
            Record objects

        """
        offset = None
        while True:
            page = self.list_page(table, fields=fields, formula=formula, page_size=page_size, offset=offset)
            yield from page.records
            if not page.has_more:
                break
            offset = page.offset

    def get(self, table: str, record_id: str) -> Record:
        """
        Get a record by ID.

        Args:
            table: Table name or ID
            record_id: The record ID

        Returns:
            Record with all non-empty fields

        Raises:
            NotFoundError: If the record does not exist

        """
        request = self._client.build_request("GET", table, record_id)
        return self._client.perform_request(request, self._decoder.decode_record)

    # =========================================================================
    # Create
    # =========================================================================

    def create(self, table: str, record: Record) -> Record:
        """
        Create a record.

        Args:
            table: Table name or ID
            record: Record to create; its `id` is never sent

        Returns:
            Created Record with server-assigned id and createdTime

        """
        request = self._client.build_request(
            "POST",
            table,
            payload=self._encoder.encode_record(record, include_id=False),
        )
        return self._client.perform_request(request, self._decoder.decode_record)

    def create_many(self, table: str, records: Sequence[Record]) -> builtins.list[Record]:
        """
        Create several records, 10 per request.

        Chunks are sent in order and the first failure stops the batch.
        Records created by earlier chunks are not rolled back.

        Args:
            table: Table name or ID
            records: Records to create

        Returns:
            Created Records in input order

        """
        payloads = [self._encoder.encode_records(chunk, include_id=False) for chunk in chunked(records, BATCH_LIMIT)]
        return self._send_batches("POST", table, payloads)

    # =========================================================================
    # Update
    # =========================================================================

    def update(self, table: str, record: Record, replace: bool = False) -> Record:
        """
        Update a record.

        With `replace=False` only the given fields are overwritten (PATCH).
        With `replace=True` every field is overwritten and fields missing
        from the record are cleared (PUT).

        Args:
            table: Table name or ID
            record: Record to update; `id` is required
            replace: Replace the entire record instead of merging fields

        Returns:
            Updated Record

        Raises:
            InvalidParametersError: If the record has no id

        """
        if record.id is None:
            raise InvalidParametersError("Record id required for update", details={"table": table})

        request = self._client.build_request(
            "PUT" if replace else "PATCH",
            table,
            record.id,
            payload=self._encoder.encode_record(record, include_id=False),
        )
        return self._client.perform_request(request, self._decoder.decode_record)

    def update_many(
        self,
        table: str,
        records: Sequence[Record],
        replace: bool = False,
    ) -> builtins.list[Record]:
        """
        Update several records, 10 per request.

        Args:
            table: Table name or ID
            records: Records to update; each needs an `id`
            replace: Replace entire records (PUT) instead of merging (PATCH)

        Returns:
            Updated Records in input order

        Raises:
            InvalidParametersError: If any record has no id

        """
        missing = [i for i, record in enumerate(records) if record.id is None]
        if missing:
            raise InvalidParametersError(
                "Record id required for update",
                details={"table": table, "indexes": missing},
            )

        payloads = [self._encoder.encode_records(chunk, include_id=True) for chunk in chunked(records, BATCH_LIMIT)]
        return self._send_batches("PUT" if replace else "PATCH", table, payloads)

    # =========================================================================
    # Delete
    # =========================================================================

    def delete(self, table: str, record_id: str) -> Record:
        """
        Delete a record.

        Args:
            table: Table name or ID
            record_id: The record ID

        Returns:
            Record carrying only the deleted id

        """
        request = self._client.build_request("DELETE", table, record_id)
        return self._client.perform_request(request, self._decoder.decode_deletion)

    def delete_many(self, table: str, record_ids: Sequence[str]) -> builtins.list[Record]:
        """
        Delete several records, 10 per request.

        Args:
            table: Table name or ID
            record_ids: IDs of the records to delete

        Returns:
            Records carrying only the deleted ids, in input order

        Raises:
            InvalidParametersError: If a single string is passed instead of a sequence

        """
        if isinstance(record_ids, str):
            raise InvalidParametersError(
                "record_ids must be a sequence of IDs, not a single string",
                details={"table": table, "record_ids": record_ids},
            )

        requests = [
            self._client.build_request("DELETE", table, query=[("records[]", rid) for rid in chunk])
            for chunk in chunked(record_ids, BATCH_LIMIT)
        ]
        logger.info("Deleting %d records from %s in %d batch(es)", len(record_ids), table, len(requests))

        results: builtins.list[Record] = []
        for request in requests:
            results.extend(self._client.perform_request(request, self._decoder.decode_batch_deletion))
        return results

    # =========================================================================
    # Helpers
    # =========================================================================

    def _send_batches(self, method: str, table: str, payloads: builtins.list[dict]) -> builtins.list[Record]:
        """Build every batch request up front, then send them one by one."""
        requests = [self._client.build_request(method, table, payload=payload) for payload in payloads]
        logger.info("Sending %d %s batch(es) to %s", len(requests), method, table)

        results: builtins.list[Record] = []
        for index, request in enumerate(requests):
            logger.debug("Batch %d/%d", index + 1, len(requests))
            results.extend(self._client.perform_request(request, self._decoder.decode_records))
        return results

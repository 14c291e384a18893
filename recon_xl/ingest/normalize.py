"""Conversion of raw file payloads into canonical records."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterable

from attrs import define, field

from recon_xl.errors import RequiredFieldMissingError, SchemaValidationError
from recon_xl.ingest.payload import ImportPayload, Record
from recon_xl.ingest.tools import clean_value
from recon_xl.schema import RecordSchema
from recon_xl.utils.dates import parse_date

logger = logging.getLogger(__name__)


@define
class NormalizeResult:
    """Outcome of normalizing one payload.

    Attributes:
        records: Canonical partial records, in source order.
        omissions: One error per row that was excluded because it lacks a
            required key.
        warnings: Non-fatal remarks (duplicate headers, unparseable dates).
    """

    records: list[Record] = field(factory=list)
    omissions: list[RequiredFieldMissingError] = field(factory=list)
    warnings: list[str] = field(factory=list)


@define
class Normalizer:
    """Builds canonical records from a payload using a record schema.

    Attributes:
        schema: The schema describing the record type.
        strict: If True, the first row that lacks a required key aborts the
            whole import by raising `RequiredFieldMissingError`. Otherwise
            such rows are collected in `NormalizeResult.omissions`.
    """

    schema: RecordSchema
    strict: bool = False
    result: NormalizeResult = field(factory=NormalizeResult, init=False)

    def __call__(self, payload: ImportPayload) -> NormalizeResult:
        self.result = NormalizeResult()
        if payload.kind == "spreadsheet":
            self._normalize_matrix(payload)
        elif payload.kind == "structured":
            self._normalize_structured(payload)
        else:
            raise SchemaValidationError(
                "Unsupported payload kind %r" % (payload.kind,),
                source=payload.source,
            )
        logger.debug(
            "Normalized %d %s record(s) from %s (%d omitted)",
            len(self.result.records),
            self.schema.name,
            payload.source or "payload",
            len(self.result.omissions),
        )
        return self.result

    def _normalize_matrix(self, payload: ImportPayload) -> None:
        rows = payload.data
        if not isinstance(rows, (list, tuple)) or not rows:
            raise SchemaValidationError(
                "The spreadsheet is empty; a header row is required",
                source=payload.source,
            )
        header_row = rows[0]
        if not isinstance(header_row, (list, tuple)) or all(
            clean_value(h) is None for h in header_row
        ):
            raise SchemaValidationError(
                "The first row of the spreadsheet must contain the headers",
                source=payload.source,
            )

        columns = self._map_headers(header_row)
        if not columns:
            raise SchemaValidationError(
                "None of the spreadsheet headers match a %s field (%s)"
                % (
                    self.schema.name,
                    ", ".join(str(h) for h in header_row if h is not None),
                ),
                source=payload.source,
            )

        for index, row in enumerate(rows[1:], start=2):
            if row is None or all(clean_value(c) is None for c in row):
                logger.debug("Skipping blank row %d", index)
                continue
            record: Record = {}
            for col_idx, key in columns.items():
                if col_idx < len(row):
                    self._set_value(record, key, row[col_idx], index)
            self._accept(record, index)

    def _map_headers(self, header_row: Iterable[Any]) -> dict[int, str]:
        """Map column indices to canonical keys.

        When several columns resolve to the same key the last one wins.
        """
        columns: dict[int, str] = {}
        seen: dict[str, Any] = {}
        for col_idx, header in enumerate(header_row):
            key = self.schema.resolve_header(header)
            if key is None:
                if clean_value(header) is not None:
                    logger.debug("Ignoring unknown column %r", header)
                continue
            if key in seen:
                msg = "Columns %r and %r both map to %s; using %r" % (
                    seen[key],
                    header,
                    key,
                    header,
                )
                logger.warning(msg)
                self.result.warnings.append(msg)
                columns = {i: k for i, k in columns.items() if k != key}
            seen[key] = header
            columns[col_idx] = key
        return columns

    def _normalize_structured(self, payload: ImportPayload) -> None:
        data = payload.data
        base_name = self.schema.base_name
        if not isinstance(data, Mapping) or base_name not in data:
            raise SchemaValidationError(
                "Expected a top-level %r key in the imported data" % base_name,
                source=payload.source,
            )
        items = data[base_name]
        if not isinstance(items, (list, tuple)):
            raise SchemaValidationError(
                "The %r key must hold a list of objects" % base_name,
                source=payload.source,
            )

        for index, item in enumerate(items, start=1):
            if not isinstance(item, Mapping):
                raise SchemaValidationError(
                    "Entry %d of %r is not an object" % (index, base_name),
                    source=payload.source,
                )
            record: Record = {}
            for name, value in item.items():
                key = self.schema.resolve_header(name)
                if key is None:
                    logger.debug("Ignoring unknown key %r", name)
                    continue
                if key in record:
                    msg = "Entry %d has more than one value for %s" % (
                        index,
                        key,
                    )
                    logger.warning(msg)
                    self.result.warnings.append(msg)
                    del record[key]
                self._set_value(record, key, value, index)
            self._accept(record, index)

    def _set_value(self, record: Record, key: str, raw: Any, row: int):
        value = clean_value(raw)
        if value is None:
            return
        if key in self.schema.date_columns:
            parsed = parse_date(value)
            if parsed is None:
                msg = "Row %d: cannot interpret %r as a date for %s" % (
                    row,
                    value,
                    key,
                )
                logger.warning(msg)
                self.result.warnings.append(msg)
                return
            value = parsed
        record[key] = value

    def _accept(self, record: Record, row: int) -> None:
        missing = [k for k in self.schema.required_keys if k not in record]
        if not missing:
            self.result.records.append(record)
            return
        error = RequiredFieldMissingError(row, missing, record)
        if self.strict:
            raise error
        logger.info("%s", error)
        self.result.omissions.append(error)


def normalize_import(
    payload: ImportPayload,
    schema: RecordSchema,
    *,
    strict: bool = False,
) -> NormalizeResult:
    """Normalize a payload into canonical records.

    Args:
        payload: The raw file content.
        schema: The record schema to normalize against.
        strict: Raise on the first row lacking a required key instead of
            collecting it.

    Returns:
        The normalized records together with omitted rows and warnings.

    Raises:
        SchemaValidationError: if the payload does not have the expected
            structure.
    """
    return Normalizer(schema, strict=strict)(payload)

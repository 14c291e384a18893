"""Conversion of records into exportable documents."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from recon_xl.ingest.payload import Record
from recon_xl.ingest.tools import clean_value
from recon_xl.schema import RecordSchema
from recon_xl.utils.dates import format_date


def export_value(value: Any) -> Any:
    """Convert a field value into something every file format can hold.

    Absent values become `None`, dates become ISO strings and decimals
    become plain numbers.
    """
    value = clean_value(value)
    if value is None:
        return None
    if isinstance(value, date):
        return format_date(value)
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    return value


def prepare_minimal(record: Record, schema: RecordSchema) -> Record:
    """Keep only the externally relevant fields of a record.

    Bookkeeping fields (anything not in `schema.minimal_keys`) and absent
    values are left out.
    """
    result: Record = {}
    for key in schema.minimal_keys:
        value = export_value(record.get(key))
        if value is not None:
            result[key] = value
    return result


def to_spreadsheet(
    records: Iterable[Record], schema: RecordSchema
) -> list[list[Any]]:
    """Build the cell matrix for a spreadsheet export.

    The first row holds the schema labels; each record then gets one row
    with its values in label order.
    """
    keys = schema.export_keys()
    matrix: list[list[Any]] = [schema.export_labels()]
    for record in records:
        matrix.append([export_value(record.get(k)) for k in keys])
    return matrix


def to_structured(
    records: Iterable[Record], schema: RecordSchema
) -> dict[str, list[Record]]:
    """Build the object graph for a JSON or YAML export."""
    return {
        schema.base_name: [prepare_minimal(r, schema) for r in records]
    }

"""Standalone function to export a record collection to a file."""

from __future__ import annotations

import logging
from typing import Sequence

from recon_xl.export.data_to_file import (
    DataFormat,
    ExportFile,
    ExportSource,
    data_to_file,
)
from recon_xl.export.serialize import to_spreadsheet, to_structured
from recon_xl.ingest.payload import Record
from recon_xl.schema import RecordSchema

logger = logging.getLogger(__name__)


def export_records(
    records: Sequence[Record],
    schema: RecordSchema,
    data_format: DataFormat,
) -> ExportFile:
    """Serialize the authoritative records of one type.

    Args:
        records: The records to export, in the order they should appear.
        schema: Schema of the records.
        data_format: Target format (`xlsx`, `csv`, `json` or `yaml`).

    Returns:
        The rendered file.
    """
    logger.info(
        "Exporting %d %s record(s) as %s",
        len(records),
        schema.name,
        data_format,
    )
    source = ExportSource(
        to_spreadsheet=lambda: to_spreadsheet(records, schema),
        to_structured=lambda: to_structured(records, schema),
    )
    return data_to_file(source, data_format, schema.base_name)

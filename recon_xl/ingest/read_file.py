"""Reading import files into payloads."""

from __future__ import annotations

import csv
import io
import json
import logging
import os.path
from typing import Any
from zipfile import BadZipFile

import yaml
from openpyxl import load_workbook  # type: ignore[import]
from openpyxl.utils.exceptions import (  # type: ignore[import]
    InvalidFileException,
)

from recon_xl.errors import SchemaValidationError
from recon_xl.ingest.payload import ImportPayload

logger = logging.getLogger(__name__)

SPREADSHEET_EXTENSIONS = (".xlsx", ".xlsm", ".csv")
STRUCTURED_EXTENSIONS = (".json", ".yaml", ".yml")


def _read_xlsx(content: bytes) -> list[list[Any]]:
    wb = load_workbook(
        filename=io.BytesIO(content), read_only=True, data_only=True
    )
    try:
        ws = wb.worksheets[0]
        rows = [list(r) for r in ws.iter_rows(values_only=True)]
    finally:
        wb.close()

    # Read-only worksheets may report trailing empty cells; trim them so
    # every row is only as wide as its content.
    for row in rows:
        while row and row[-1] is None:
            row.pop()
    return rows


def _read_csv(content: bytes) -> list[list[Any]]:
    text = content.decode("utf-8-sig")
    return [row for row in csv.reader(io.StringIO(text, newline=""))]


def read_import_bytes(content: bytes, file_name: str) -> ImportPayload:
    """Parse the content of an uploaded file.

    The file type is deduced from the extension of `file_name`.

    Args:
        content: Raw file content.
        file_name: Name of the file (only the extension is used to pick the
            parser, the full name appears in error messages).

    Returns:
        A spreadsheet payload for `.xlsx`/`.csv` files, a structured payload
        for `.json`/`.yaml` files.

    Raises:
        SchemaValidationError: if the file type is not supported or the file
            can't be parsed.
    """
    ext = os.path.splitext(file_name)[1].lower()
    try:
        if ext in (".xlsx", ".xlsm"):
            return ImportPayload.spreadsheet(_read_xlsx(content), file_name)
        if ext == ".csv":
            return ImportPayload.spreadsheet(_read_csv(content), file_name)
        if ext == ".json":
            return ImportPayload.structured(
                json.loads(content.decode("utf-8-sig")), file_name
            )
        if ext in (".yaml", ".yml"):
            return ImportPayload.structured(
                yaml.safe_load(content.decode("utf-8-sig")), file_name
            )
    except (
        BadZipFile,
        InvalidFileException,
        KeyError,
        UnicodeDecodeError,
        csv.Error,
        json.JSONDecodeError,
        yaml.YAMLError,
    ) as e:
        logger.debug("Failed to parse %s", file_name, exc_info=True)
        raise SchemaValidationError(
            "Unable to parse %s: %s" % (file_name, e), source=file_name
        ) from e

    raise SchemaValidationError(
        "Unsupported file type %r; expected one of %s"
        % (
            ext or file_name,
            ", ".join(SPREADSHEET_EXTENSIONS + STRUCTURED_EXTENSIONS),
        ),
        source=file_name,
    )


def read_import_file(path: str) -> ImportPayload:
    """Read and parse an import file from disk."""
    with open(path, "rb") as f:
        content = f.read()
    logger.debug("Read %d bytes from %s", len(content), path)
    return read_import_bytes(content, os.path.basename(path))

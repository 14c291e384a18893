"""Rendering export documents into file content."""

from __future__ import annotations

import csv
import io
import json
import logging
from typing import Any, Callable, Literal, TypeAlias

import yaml
from attrs import define, field
from openpyxl import Workbook  # type: ignore[import]
from openpyxl.styles import Alignment, Font  # type: ignore[import]
from openpyxl.utils import get_column_letter  # type: ignore[import]
from openpyxl.worksheet.table import (  # type: ignore[import]
    Table,
    TableColumn,
    TableStyleInfo,
)

logger = logging.getLogger(__name__)

DataFormat: TypeAlias = Literal["xlsx", "csv", "json", "yaml"]
SPREADSHEET_FORMATS = ("xlsx", "csv")
STRUCTURED_FORMATS = ("json", "yaml")

MEDIA_TYPES: dict[str, str] = {
    "xlsx": (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    ),
    "csv": "text/csv",
    "json": "application/json",
    "yaml": "application/yaml",
}


@define(frozen=True)
class ExportFile:
    """A rendered export ready to be saved or downloaded."""

    file_name: str
    content: bytes = field(repr=False)
    media_type: str

    def save(self, path: str) -> None:
        with open(path, "wb") as f:
            f.write(self.content)
        logger.info("Wrote %d bytes to %s", len(self.content), path)


@define(frozen=True)
class ExportSource:
    """Lazily builds the two document shapes for an export.

    Attributes:
        to_spreadsheet: Returns the cell matrix (header row first).
        to_structured: Returns the JSON-like object graph.
    """

    to_spreadsheet: Callable[[], list[list[Any]]]
    to_structured: Callable[[], dict[str, Any]]


def _column_width(values: list[Any]) -> float:
    longest = max((len(str(v)) for v in values if v is not None), default=0)
    return float(min(max(longest + 2, 10), 60))


def matrix_to_xlsx(matrix: list[list[Any]], table_name: str) -> bytes:
    """Write a cell matrix into a workbook with one structured table."""
    wb = Workbook()
    ws = wb.active
    ws.title = table_name[0:31]

    header_align = Alignment(
        wrap_text=False, horizontal="center", vertical="top"
    )
    header_font = Font(bold=True)
    for row_idx, row in enumerate(matrix, start=1):
        for col_idx, value in enumerate(row, start=1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            if isinstance(value, str) and value.startswith("="):
                # Text, not a formula.
                cell.data_type = "s"
            if row_idx == 1:
                cell.alignment = header_align
                cell.font = header_font

    num_cols = len(matrix[0]) if matrix else 0
    if num_cols:
        ref = "A1:%s%d" % (get_column_letter(num_cols), max(len(matrix), 2))
        table_obj = Table(displayName=table_name, ref=ref)
        table_obj.tableStyleInfo = TableStyleInfo(
            name="TableStyleMedium9",
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False,
        )
        table_obj.tableColumns = [
            TableColumn(id=i + 1, name=str(h)) for i, h in enumerate(matrix[0])
        ]
        ws.add_table(table_obj)

        for col_idx in range(1, num_cols + 1):
            column = [r[col_idx - 1] for r in matrix if len(r) >= col_idx]
            ws.column_dimensions[get_column_letter(col_idx)].width = (
                _column_width(column)
            )

    buffer = io.BytesIO()
    wb.save(buffer)
    wb.close()
    return buffer.getvalue()


def matrix_to_csv(matrix: list[list[Any]]) -> bytes:
    sio = io.StringIO()
    writer = csv.writer(sio, lineterminator="\n")
    for row in matrix:
        writer.writerow(["" if v is None else v for v in row])
    return sio.getvalue().encode("utf-8")


def _json_default(value: Any) -> Any:
    return str(value)


def data_to_file(
    source: ExportSource,
    data_format: DataFormat,
    base_name: str,
) -> ExportFile:
    """Render an export in the requested format.

    Args:
        source: Producer of the spreadsheet and structured documents. Only
            the one needed for `data_format` is called.
        data_format: `xlsx` or `csv` for a spreadsheet, `json` or `yaml` for
            structured text.
        base_name: Used for the file name and the spreadsheet table name.

    Returns:
        The rendered file.
    """
    file_name = "export_%s.%s" % (base_name, data_format)
    if data_format == "xlsx":
        content = matrix_to_xlsx(source.to_spreadsheet(), base_name)
    elif data_format == "csv":
        content = matrix_to_csv(source.to_spreadsheet())
    elif data_format == "json":
        content = json.dumps(
            source.to_structured(), indent=2, default=_json_default
        ).encode("utf-8")
    elif data_format == "yaml":
        content = yaml.safe_dump(
            source.to_structured(), sort_keys=False, allow_unicode=True
        ).encode("utf-8")
    else:
        raise ValueError("Unknown export format %r" % (data_format,))

    logger.debug("Rendered %s (%d bytes)", file_name, len(content))
    return ExportFile(
        file_name=file_name,
        content=content,
        media_type=MEDIA_TYPES[data_format],
    )

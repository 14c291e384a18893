"""Export functionality."""

from recon_xl.export.data_to_file import (
    DataFormat,
    ExportFile,
    ExportSource,
    data_to_file,
)
from recon_xl.export.export_records import export_records
from recon_xl.export.serialize import (
    export_value,
    prepare_minimal,
    to_spreadsheet,
    to_structured,
)

__all__ = [
    "DataFormat",
    "ExportFile",
    "ExportSource",
    "data_to_file",
    "export_records",
    "export_value",
    "prepare_minimal",
    "to_spreadsheet",
    "to_structured",
]

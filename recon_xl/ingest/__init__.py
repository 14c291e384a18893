"""Import normalization, diffing and batch resolution."""

from recon_xl.ingest.compute_diff import DiffBuilder, compute_diff, summarize
from recon_xl.ingest.diff_spec import DiffSpec, DiffStatus
from recon_xl.ingest.field_change import FieldChange
from recon_xl.ingest.normalize import (
    NormalizeResult,
    Normalizer,
    normalize_import,
)
from recon_xl.ingest.payload import ImportPayload, Record
from recon_xl.ingest.read_file import read_import_bytes, read_import_file
from recon_xl.ingest.report import render_diff_report
from recon_xl.ingest.resolve_batch import get_changed, resolve_batch
from recon_xl.ingest.session import ImportSession

__all__ = [
    "DiffBuilder",
    "DiffSpec",
    "DiffStatus",
    "FieldChange",
    "ImportPayload",
    "ImportSession",
    "NormalizeResult",
    "Normalizer",
    "Record",
    "compute_diff",
    "get_changed",
    "normalize_import",
    "read_import_bytes",
    "read_import_file",
    "render_diff_report",
    "resolve_batch",
    "summarize",
]

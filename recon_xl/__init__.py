"""Import/export reconciliation for tabular and structured record files."""

from recon_xl.__version__ import __version__
from recon_xl.applicants import APPLICANT_SCHEMA
from recon_xl.errors import (
    PrimaryKeyCollisionError,
    ReconError,
    RequiredFieldMissingError,
    SchemaDefinitionError,
    SchemaValidationError,
    StalePreconditionError,
    UnknownSchemaError,
)
from recon_xl.export import export_records, to_spreadsheet, to_structured
from recon_xl.ingest import (
    DiffSpec,
    DiffStatus,
    FieldChange,
    ImportPayload,
    ImportSession,
    compute_diff,
    get_changed,
    normalize_import,
    read_import_file,
    resolve_batch,
)
from recon_xl.instructors import INSTRUCTOR_SCHEMA
from recon_xl.schema import RecordSchema, get_schema, register_schema

__all__ = [
    "APPLICANT_SCHEMA",
    "DiffSpec",
    "DiffStatus",
    "FieldChange",
    "INSTRUCTOR_SCHEMA",
    "ImportPayload",
    "ImportSession",
    "PrimaryKeyCollisionError",
    "ReconError",
    "RecordSchema",
    "RequiredFieldMissingError",
    "SchemaDefinitionError",
    "SchemaValidationError",
    "StalePreconditionError",
    "UnknownSchemaError",
    "__version__",
    "compute_diff",
    "export_records",
    "get_changed",
    "get_schema",
    "normalize_import",
    "read_import_file",
    "register_schema",
    "resolve_batch",
    "to_spreadsheet",
    "to_structured",
]

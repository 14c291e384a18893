"""Errors raised while importing and exporting records."""

from __future__ import annotations

from typing import Any, Sequence


class ReconError(Exception):
    """Base class for all errors raised by this package."""

    def as_dict(self) -> dict[str, Any]:
        return {"kind": self.__class__.__name__, "message": str(self)}


class SchemaDefinitionError(ReconError):
    """A record schema was declared with inconsistent settings.

    Attributes:
        schema_name: Name of the offending schema.
    """

    def __init__(self, msg: str, schema_name: str):
        super().__init__(msg)
        self.schema_name = schema_name

    def as_dict(self) -> dict[str, Any]:
        result = super().as_dict()
        result["schema"] = self.schema_name
        return result


class UnknownSchemaError(ReconError, KeyError):
    """No schema was registered under the requested name."""

    def __init__(self, name: str):
        super().__init__("No record schema named %r" % name)
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])


class SchemaValidationError(ReconError):
    """The input file does not have the structure we expect.

    Attributes:
        source: Optional description of the input (usually a file name).
    """

    def __init__(self, msg: str, source: str | None = None):
        super().__init__(msg)
        self.source = source

    def as_dict(self) -> dict[str, Any]:
        result = super().as_dict()
        result["source"] = self.source
        return result


class RequiredFieldMissingError(ReconError):
    """A row (or object) lacks one or more required keys.

    These are normally collected by the normalizer instead of being raised.

    Attributes:
        row: 1-based position of the row in the source. For spreadsheets the
            header is row 1, so the first data row is 2. For structured
            input this is the 1-based index in the array.
        missing: The required canonical keys that were absent.
        record: The partial record that was built for the row.
    """

    def __init__(
        self,
        row: int,
        missing: Sequence[str],
        record: dict[str, Any] | None = None,
    ):
        super().__init__(
            "Row %d is missing required field(s): %s"
            % (row, ", ".join(missing))
        )
        self.row = row
        self.missing = tuple(missing)
        self.record = record or {}

    def as_dict(self) -> dict[str, Any]:
        result = super().as_dict()
        result["row"] = self.row
        result["missing"] = list(self.missing)
        return result


class StalePreconditionError(ReconError):
    """A batch was requested while no valid diff was available."""


class PrimaryKeyCollisionError(ReconError):
    """The existing collection contains duplicate primary key values.

    Attributes:
        primary_key: Name of the primary key field.
        values: The duplicated values, in first-seen order.
    """

    def __init__(self, primary_key: str, values: Sequence[Any]):
        super().__init__(
            "Existing records share %s value(s): %s"
            % (primary_key, ", ".join(repr(v) for v in values))
        )
        self.primary_key = primary_key
        self.values = tuple(values)

    def as_dict(self) -> dict[str, Any]:
        result = super().as_dict()
        result["primary_key"] = self.primary_key
        result["values"] = list(self.values)
        return result

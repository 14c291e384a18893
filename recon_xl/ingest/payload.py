"""Raw parsed file content handed to the normalizer."""

from __future__ import annotations

from typing import Any, Literal, TypeAlias

from attrs import define, field

PayloadKind: TypeAlias = Literal["spreadsheet", "structured"]
Record: TypeAlias = dict[str, Any]


@define(frozen=True)
class ImportPayload:
    """The content of an imported file before normalization.

    Attributes:
        kind: `"spreadsheet"` when `data` is a matrix of cells whose first
            row holds the headers, `"structured"` when `data` is a JSON-like
            object graph.
        data: The parsed content.
        source: Optional description of where the data came from, used in
            error messages.
    """

    kind: PayloadKind
    data: Any = field(repr=False)
    source: str | None = None

    @classmethod
    def spreadsheet(
        cls, rows: Any, source: str | None = None
    ) -> "ImportPayload":
        return cls("spreadsheet", [list(r) for r in rows], source)

    @classmethod
    def structured(
        cls, data: Any, source: str | None = None
    ) -> "ImportPayload":
        return cls("structured", data, source)

"""Extraction of the records that must be written."""

from __future__ import annotations

from typing import Sequence

from recon_xl.errors import StalePreconditionError
from recon_xl.ingest.diff_spec import DiffSpec
from recon_xl.ingest.payload import Record


def get_changed(diff: Sequence[DiffSpec]) -> list[Record]:
    """Return the records of new and modified diff specs, in order.

    Unchanged entries are left out so that they don't cause redundant
    writes.
    """
    return [item.obj for item in diff if item.needs_write]


def resolve_batch(diff: Sequence[DiffSpec] | None) -> list[Record]:
    """Like `get_changed()` but refuses to work without a diff.

    Raises:
        StalePreconditionError: if `diff` is `None` or empty.
    """
    if not diff:
        raise StalePreconditionError(
            "Unable to compute an appropriate diff; load a file first"
        )
    return get_changed(diff)

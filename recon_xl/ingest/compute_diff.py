"""Standalone function to classify imported records against existing ones."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Hashable, Iterable, Sequence

from recon_xl.errors import PrimaryKeyCollisionError
from recon_xl.ingest.diff_spec import DiffSpec, DiffStatus
from recon_xl.ingest.field_change import FieldChange
from recon_xl.ingest.payload import Record
from recon_xl.ingest.tools import (
    KeyIndex,
    clean_value,
    lookup_key,
    values_equal,
)
from recon_xl.schema import RecordSchema

logger = logging.getLogger(__name__)


class DiffBuilder:
    """Compares normalized records with the existing collection.

    Every imported record is classified as:
    - new (its primary key matches no existing record),
    - unchanged (it matches and no field present in it differs), or
    - modified (it matches and at least one present field differs).

    Fields that the imported record does not carry are never reported as
    changes, so a partial import can not clear existing values.
    """

    def __init__(self, schema: RecordSchema, existing: Iterable[Record]):
        """Initialize the builder.

        Args:
            schema: Schema of the compared records.
            existing: The current authoritative records. They are only read.

        Raises:
            PrimaryKeyCollisionError: if two existing records share a primary
                key value.
        """
        self.schema = schema
        self.lookup = self._build_lookup(existing)

    def _build_lookup(self, existing: Iterable[Record]) -> KeyIndex:
        pk = self.schema.primary_key
        lookup = KeyIndex()
        duplicates: Counter[Hashable] = Counter()
        for rec in existing:
            key = lookup_key(rec.get(pk))
            if key is None:
                logger.warning(
                    "Existing %s record without %s", self.schema.name, pk
                )
                continue
            if lookup.get(rec.get(pk)) is not None:
                duplicates[key] += 1
                continue
            lookup.add(rec.get(pk), rec)
        if duplicates:
            raise PrimaryKeyCollisionError(pk, list(duplicates))
        return lookup

    def __call__(self, incoming: Iterable[Record]) -> list[DiffSpec]:
        result: list[DiffSpec] = []
        for rec in incoming:
            existing = self.lookup.get(rec.get(self.schema.primary_key))
            if existing is None:
                result.append(self._new(rec))
            else:
                result.append(self._compare(existing, rec))
        return result

    def _new(self, rec: Record) -> DiffSpec:
        return DiffSpec(status=DiffStatus.NEW, obj=rec, incoming=rec)

    def _compare(self, existing: Record, rec: Record) -> DiffSpec:
        changes = self.field_changes(existing, rec)
        if not changes:
            return DiffSpec(
                status=DiffStatus.UNCHANGED,
                obj=existing,
                incoming=rec,
                existing=existing,
            )

        merged = dict(existing)
        for key, change in changes.items():
            merged[key] = change.to_value
        return DiffSpec(
            status=DiffStatus.MODIFIED,
            obj=merged,
            changed_fields=changes,
            incoming=rec,
            existing=existing,
        )

    def field_changes(
        self, existing: Record, rec: Record
    ) -> dict[str, FieldChange]:
        """Compute the changes an imported record would make.

        Only canonical keys present in `rec` are considered.

        Args:
            existing: The existing record.
            rec: The imported record.

        Returns:
            Field name to change, in schema key order.
        """
        changes: dict[str, FieldChange] = {}
        for key in self.schema.keys:
            if key not in rec:
                continue
            new_val = clean_value(rec[key])
            if new_val is None:
                continue
            old_val = existing.get(key)
            if values_equal(old_val, new_val):
                continue
            changes[key] = FieldChange(from_value=old_val, to_value=new_val)
        return changes


def compute_diff(
    incoming: Sequence[Record],
    existing: Iterable[Record],
    schema: RecordSchema,
) -> list[DiffSpec]:
    """Classify each imported record against the existing collection.

    The result has one entry per imported record, in the same order.
    Existing records without an imported counterpart are not reported.

    Args:
        incoming: Normalized imported records.
        existing: The current authoritative records.
        schema: Schema of the records.

    Returns:
        The list of diff specs.

    Raises:
        PrimaryKeyCollisionError: if the existing collection has duplicate
            primary key values.
    """
    diff = DiffBuilder(schema, existing)(incoming)
    logger.info(
        "Diff of %d %s record(s): %s",
        len(diff),
        schema.name,
        summarize(diff),
    )
    return diff


def summarize(diff: Iterable[DiffSpec]) -> dict[str, Any]:
    """Count diff specs by status."""
    counts = {str(s): 0 for s in DiffStatus}
    for item in diff:
        counts[str(item.status)] += 1
    return counts

"""Render plain-text review reports for computed diffs.

The report is what a user reviews before confirming an import: the raw
error when the file could not be processed, an explicit notice when there
is nothing to do, otherwise the records that will be added and modified.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Sequence

from recon_xl.ingest.diff_spec import DiffSpec, DiffStatus
from recon_xl.ingest.tools import clean_value
from recon_xl.utils.dates import format_date

if TYPE_CHECKING:
    from recon_xl.errors import RequiredFieldMissingError
    from recon_xl.ingest.payload import Record
    from recon_xl.schema import RecordSchema


def _norm_text(value: Any) -> str:
    value = clean_value(value)
    if value is None:
        return "(empty)"
    if isinstance(value, date):
        return format_date(value)
    return str(value)


def describe_record(record: "Record", schema: "RecordSchema") -> str:
    """One-line description of a record: primary key then other values."""
    pk = schema.primary_key
    others = [
        _norm_text(record.get(k))
        for k in schema.export_keys()
        if k != pk and clean_value(record.get(k)) is not None
    ]
    text = _norm_text(record.get(pk))
    if others:
        text += " - " + ", ".join(others)
    return text


def render_diff_report(
    schema: "RecordSchema",
    diff: Sequence[DiffSpec] | None,
    *,
    error: Exception | None = None,
    omissions: Sequence["RequiredFieldMissingError"] = (),
    warnings: Sequence[str] = (),
) -> str:
    """Render a human-readable review of a diff.

    Args:
        schema: Schema of the compared records.
        diff: The computed diff, or `None` when nothing is loaded.
        error: An error raised while processing the file. When present it
            is the only thing reported.
        omissions: Rows excluded because they lack required fields.
        warnings: Non-fatal remarks from normalization.

    Returns:
        The report text.
    """
    if error is not None:
        return "Error: %s" % error
    if diff is None:
        return "No data loaded..."

    lines: list[str] = []
    new_items = [d for d in diff if d.status == DiffStatus.NEW]
    modified = [d for d in diff if d.status == DiffStatus.MODIFIED]
    label = schema.labels

    if not new_items and not modified:
        lines.append(
            "No difference between imported %s and those already on the "
            "system." % schema.base_name
        )
    if new_items:
        lines.append(
            "The following %s will be added (%d):"
            % (schema.base_name, len(new_items))
        )
        for item in new_items:
            lines.append("  + " + describe_record(item.obj, schema))
    if modified:
        lines.append(
            "The following %s will be modified (%d):"
            % (schema.base_name, len(modified))
        )
        for item in modified:
            lines.append("  * " + describe_record(item.obj, schema))
            for key, change in item.changed_fields.items():
                lines.append(
                    "      %s: %s -> %s"
                    % (
                        label.get(key, key),
                        _norm_text(change.from_value),
                        _norm_text(change.to_value),
                    )
                )
    if omissions:
        lines.append("The following rows were skipped (%d):" % len(omissions))
        for omission in omissions:
            lines.append("  - %s" % omission)
    if warnings:
        lines.append("Warnings:")
        for warning in warnings:
            lines.append("  ! %s" % warning)
    return "\n".join(lines)

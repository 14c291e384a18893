"""State of a single import attempt."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Iterable

from attrs import define, field

from recon_xl.errors import ReconError, StalePreconditionError
from recon_xl.ingest.compute_diff import compute_diff
from recon_xl.ingest.diff_spec import DiffSpec, DiffStatus
from recon_xl.ingest.normalize import NormalizeResult, normalize_import
from recon_xl.ingest.payload import ImportPayload, Record
from recon_xl.ingest.read_file import read_import_file
from recon_xl.ingest.report import render_diff_report
from recon_xl.ingest.resolve_batch import resolve_batch
from recon_xl.schema import RecordSchema

logger = logging.getLogger(__name__)

PersistFn = Callable[[list[Record]], "Awaitable[Any] | Any"]


@define
class ImportSession:
    """Owns the loaded file, the computed diff and the error state.

    The diff is always recomputed from scratch out of the normalized file
    and the existing records; it is never patched. Loading another file or
    clearing the session discards the diff and any error.

    Attributes:
        schema: Schema of the imported records.
        existing: The current authoritative records. The session never
            mutates them.
        strict: Passed to the normalizer; if True a row lacking a required
            key fails the whole file.
        payload: The loaded file content.
        normalized: The normalization result for `payload`.
        diff: The latest diff, or `None`.
        error: The error raised while normalizing or diffing, if any.
        in_progress: Set while a confirmed batch is being persisted. While
            set, changes to `existing` do not trigger a recomputation.
    """

    schema: RecordSchema
    existing: list[Record] = field(factory=list, converter=list)
    strict: bool = False
    payload: ImportPayload | None = field(default=None, init=False)
    normalized: NormalizeResult | None = field(default=None, init=False)
    diff: list[DiffSpec] | None = field(default=None, init=False)
    error: ReconError | None = field(default=None, init=False)
    in_progress: bool = field(default=False, init=False)

    def load(self, payload: ImportPayload) -> None:
        """Load a new payload, discarding anything computed before."""
        self.clear()
        self.payload = payload
        try:
            self.normalized = normalize_import(
                payload, self.schema, strict=self.strict
            )
        except ReconError as e:
            logger.warning("Unable to process %s: %s", payload.source, e)
            self.error = e
            return
        self.recompute()

    def load_file(self, path: str) -> None:
        """Read a file from disk and load it.

        Errors raised while parsing the file are recorded like
        normalization errors.
        """
        self.clear()
        try:
            payload = read_import_file(path)
        except ReconError as e:
            logger.warning("Unable to read %s: %s", path, e)
            self.error = e
            return
        self.load(payload)

    def clear(self) -> None:
        """Forget the loaded file, its diff and any error."""
        self.payload = None
        self.normalized = None
        self.diff = None
        self.error = None

    def set_existing(self, records: Iterable[Record]) -> None:
        """Replace the existing collection and recompute the diff."""
        self.existing = list(records)
        if self.in_progress:
            logger.debug("Import in progress; not recomputing the diff")
            return
        self.recompute()

    def recompute(self) -> None:
        """Compute the diff from the normalized file and existing records."""
        if self.normalized is None:
            self.diff = None
            return
        self.error = None
        try:
            self.diff = compute_diff(
                self.normalized.records, self.existing, self.schema
            )
        except ReconError as e:
            logger.warning("Unable to compute the diff: %s", e)
            self.diff = None
            self.error = e

    @property
    def has_changes(self) -> bool:
        return any(d.needs_write for d in self.diff or ())

    def items(self, status: DiffStatus) -> list[DiffSpec]:
        return [d for d in self.diff or () if d.status == status]

    def report(self) -> str:
        """Text shown to the user for review."""
        normalized = self.normalized
        return render_diff_report(
            self.schema,
            self.diff,
            error=self.error,
            omissions=normalized.omissions if normalized else (),
            warnings=normalized.warnings if normalized else (),
        )

    def pending_records(self) -> list[Record]:
        """The records a confirmation would write.

        Raises:
            StalePreconditionError: if no valid diff is available.
        """
        if self.error is not None:
            raise StalePreconditionError(
                "The loaded file could not be processed: %s" % self.error
            )
        return resolve_batch(self.diff)

    async def confirm(self, persist: PersistFn) -> list[Record]:
        """Hand the changed records to the persistence collaborator.

        On success the session is cleared. If `persist` fails the error
        propagates and the loaded file and diff are kept so the user can
        retry.

        Args:
            persist: Called with the records to upsert. It may return an
                awaitable.

        Returns:
            The records that were handed to `persist`.
        """
        if self.in_progress:
            raise StalePreconditionError("An import is already in progress")
        changed = self.pending_records()

        self.in_progress = True
        try:
            if changed:
                result = persist(changed)
                if inspect.isawaitable(result):
                    await result
            else:
                logger.info("Nothing to write for %s", self.schema.name)
        except Exception:
            logger.exception(
                "Failed to write %d %s record(s)",
                len(changed),
                self.schema.name,
            )
            raise
        finally:
            self.in_progress = False

        logger.info("Wrote %d %s record(s)", len(changed), self.schema.name)
        self.clear()
        return changed

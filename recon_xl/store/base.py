"""Persistence collaborator contracts."""

from __future__ import annotations

import logging
from typing import Callable, Protocol, Sequence

from attrs import define, field

from recon_xl.ingest.payload import Record

logger = logging.getLogger(__name__)

Listener = Callable[[list[Record]], None]


@define
class UpsertResult:
    """Result of writing a batch of records.

    Attributes:
        inserted: Number of records created.
        updated: Number of existing records changed.
    """

    inserted: int = 0
    updated: int = 0


class RecordStore(Protocol):
    """Supplies the authoritative records and accepts upserts."""

    def list_records(self) -> list[Record]: ...

    def upsert(self, records: Sequence[Record]) -> UpsertResult: ...


@define
class ObservableStore:
    """Mixin that notifies listeners when the stored records change.

    Listeners receive the full, updated record list, which the store passes
    to `notify()` after each write. This is how an `ImportSession` is kept
    current after a batch is written.
    """

    listeners: list[Listener] = field(factory=list, init=False, repr=False)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; the returned callable unregisters it."""
        self.listeners.append(listener)

        def unsubscribe():
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    def notify(self, records: list[Record]) -> None:
        """Hand the updated record list to every listener."""
        for listener in list(self.listeners):
            listener(records)

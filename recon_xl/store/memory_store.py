"""In-memory record store."""

from __future__ import annotations

import logging
from typing import Sequence

from attrs import define, field

from recon_xl.ingest.payload import Record
from recon_xl.ingest.tools import KeyIndex, lookup_key
from recon_xl.schema import RecordSchema
from recon_xl.store.base import ObservableStore, UpsertResult

logger = logging.getLogger(__name__)


@define
class MemoryRecordStore(ObservableStore):
    """Keeps the records of one type in a list.

    Attributes:
        schema: Schema of the stored records.
        records: The stored records, in insertion order.
    """

    schema: RecordSchema
    records: list[Record] = field(factory=list, converter=list)

    def list_records(self) -> list[Record]:
        return [dict(r) for r in self.records]

    def upsert(self, records: Sequence[Record]) -> UpsertResult:
        """Insert or replace records, matching them by primary key."""
        pk = self.schema.primary_key
        index = KeyIndex()
        for i, r in enumerate(self.records):
            if lookup_key(r.get(pk)) is not None:
                index.add(r.get(pk), i)
        result = UpsertResult()
        for rec in records:
            if lookup_key(rec.get(pk)) is None:
                raise ValueError("Record without %s: %r" % (pk, rec))
            position = index.get(rec.get(pk))
            if position is None:
                index.add(rec.get(pk), len(self.records))
                self.records.append(dict(rec))
                result.inserted += 1
            else:
                updated = dict(self.records[position])
                updated.update(rec)
                self.records[position] = updated
                result.updated += 1
        logger.debug(
            "Upserted %s: %d inserted, %d updated",
            self.schema.name,
            result.inserted,
            result.updated,
        )
        if self.listeners:
            self.notify(self.list_records())
        return result

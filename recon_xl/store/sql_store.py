"""Record store backed by a SQLAlchemy database."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Sequence, Type

from attrs import define, field
from sqlalchemy import DateTime, String, inspect, select

from recon_xl.ingest.payload import Record
from recon_xl.ingest.tools import clean_value
from recon_xl.schema import RecordSchema
from recon_xl.store.base import ObservableStore, UpsertResult
from recon_xl.store.connection import DbConn
from recon_xl.store.models import MODELS_BY_SCHEMA, Base
from recon_xl.utils.dates import parse_date

logger = logging.getLogger(__name__)


def to_column_value(column: Any, value: Any) -> Any:
    """Coerce a record value for storage in a database column.

    Spreadsheets may store numeric content as numbers even when the column
    is textual. For string columns we convert simple numbers to strings,
    preferring `"10"` over `"10.0"` when integral.
    """
    value = clean_value(value)
    if value is None:
        return None
    if isinstance(column.type, DateTime):
        return parse_date(value)
    if not isinstance(column.type, String) or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return str(int(value))
        return str(value)
    return str(value)


@define
class SqlRecordStore(ObservableStore):
    """Stores records of one type in a database table.

    Attributes:
        conn: The database connection.
        schema: Schema of the stored records.
        model: Mapped class of the table. Defaults to the model registered
            for the schema name.
    """

    conn: DbConn
    schema: RecordSchema
    model: Type[Base] = field(default=None)

    def __attrs_post_init__(self):
        if self.model is None:
            self.model = MODELS_BY_SCHEMA[self.schema.name]

    def create_tables(self) -> None:
        self.conn.create_all_tables(Base)

    def _columns(self) -> dict[str, Any]:
        return {c.key: c for c in inspect(self.model).columns}

    def _to_record(self, db_rec: Any) -> Record:
        return {
            name: getattr(db_rec, name) for name in self._columns().keys()
        }

    def list_records(self) -> list[Record]:
        """All stored records ordered by their database id."""
        with self.conn.session() as session:
            stmt = select(self.model).order_by(self.model.id)  # type: ignore
            return [self._to_record(r) for r in session.scalars(stmt)]

    def upsert(self, records: Sequence[Record]) -> UpsertResult:
        """Insert or update records in a single transaction.

        Records are matched on the schema's primary key. Only the fields of
        the schema are written; the database id and timestamps are managed
        by the database. If anything fails the whole batch is rolled back
        and the error propagates.
        """
        pk = self.schema.primary_key
        columns = self._columns()
        writable = [k for k in self.schema.keys if k in columns]
        result = UpsertResult()

        with self.conn.session(auto_commit=True) as session:
            for rec in records:
                pk_value = to_column_value(columns[pk], rec.get(pk))
                if pk_value is None:
                    raise ValueError("Record without %s: %r" % (pk, rec))
                stmt = select(self.model).where(
                    getattr(self.model, pk) == pk_value
                )
                db_rec = session.scalars(stmt).one_or_none()
                if db_rec is None:
                    db_rec = self.model()
                    session.add(db_rec)
                    result.inserted += 1
                else:
                    result.updated += 1
                for key in writable:
                    if key in rec:
                        setattr(
                            db_rec,
                            key,
                            to_column_value(columns[key], rec[key]),
                        )
                session.flush()

        logger.info(
            "Stored %s records: %d inserted, %d updated",
            self.schema.name,
            result.inserted,
            result.updated,
        )
        if self.listeners:
            self.notify(self.list_records())
        return result

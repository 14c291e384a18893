"""Persistence collaborators."""

from recon_xl.store.base import ObservableStore, RecordStore, UpsertResult
from recon_xl.store.connection import DbConn
from recon_xl.store.memory_store import MemoryRecordStore
from recon_xl.store.sql_store import SqlRecordStore

__all__ = [
    "DbConn",
    "MemoryRecordStore",
    "ObservableStore",
    "RecordStore",
    "SqlRecordStore",
    "UpsertResult",
]

from __future__ import annotations

from typing import Any

import pytest

from recon_xl.applicants import APPLICANT_SCHEMA
from recon_xl.store import DbConn, MemoryRecordStore, SqlRecordStore


def make_applicants() -> list[dict[str, Any]]:
    return [
        {
            "id": 1,
            "utorid": "smithj",
            "student_number": "1001234567",
            "first_name": "John",
            "last_name": "Smith",
            "email": "john.smith@example.com",
            "phone": "416-555-0101",
        },
        {
            "id": 2,
            "utorid": "doej",
            "student_number": "1007654321",
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jane.doe@example.com",
            "phone": "416-555-0102",
        },
        {
            "id": 3,
            "utorid": "leek",
            "student_number": "1000000003",
            "first_name": "Kim",
            "last_name": "Lee",
            "email": "kim.lee@example.com",
            "phone": None,
        },
    ]


@pytest.fixture
def schema():
    return APPLICANT_SCHEMA


@pytest.fixture
def applicants():
    return make_applicants()


@pytest.fixture
def memory_store(schema, applicants):
    return MemoryRecordStore(schema=schema, records=applicants)


@pytest.fixture
def db_conn():
    conn = DbConn(c_string="sqlite:///:memory:")
    yield conn
    conn.close()


@pytest.fixture
def sql_store(db_conn, schema):
    store = SqlRecordStore(conn=db_conn, schema=schema)
    store.create_tables()
    return store

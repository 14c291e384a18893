import json
from datetime import datetime
from decimal import Decimal
from io import BytesIO

import pytest
import yaml
from openpyxl import load_workbook

from recon_xl.export import (
    export_records,
    export_value,
    prepare_minimal,
    to_spreadsheet,
    to_structured,
)
from recon_xl.ingest import (
    DiffStatus,
    compute_diff,
    normalize_import,
    read_import_bytes,
)


class TestSerialize:
    def test_export_value(self):
        assert export_value("  ") is None
        assert export_value(" x ") == "x"
        assert export_value(Decimal("3")) == 3
        assert export_value(Decimal("3.25")) == 3.25
        assert export_value(datetime(2024, 5, 1)) == "2024-05-01"

    def test_spreadsheet_header_is_labels(self, schema, applicants):
        matrix = to_spreadsheet(applicants, schema)
        assert matrix[0] == [
            "Last Name",
            "First Name",
            "UTORid",
            "Student Number",
            "email",
            "Phone",
        ]
        assert matrix[1] == [
            "Smith",
            "John",
            "smithj",
            "1001234567",
            "john.smith@example.com",
            "416-555-0101",
        ]
        assert matrix[3][-1] is None
        assert len(matrix) == 4

    def test_spreadsheet_of_nothing(self, schema):
        assert to_spreadsheet([], schema) == [schema.export_labels()]

    def test_minimal_drops_bookkeeping(self, schema, applicants):
        record = dict(applicants[2], created_at=datetime(2024, 1, 1))
        assert prepare_minimal(record, schema) == {
            "utorid": "leek",
            "student_number": "1000000003",
            "first_name": "Kim",
            "last_name": "Lee",
            "email": "kim.lee@example.com",
        }

    def test_structured(self, schema, applicants):
        data = to_structured(applicants, schema)
        assert list(data) == ["applicants"]
        assert [r["utorid"] for r in data["applicants"]] == [
            "smithj",
            "doej",
            "leek",
        ]
        assert "id" not in data["applicants"][0]
        assert list(data["applicants"][0])[0] == "utorid"


class TestExportFile:
    def test_xlsx(self, schema, applicants):
        exported = export_records(applicants, schema, "xlsx")
        assert exported.file_name == "export_applicants.xlsx"
        assert exported.media_type.endswith("spreadsheetml.sheet")

        wb = load_workbook(BytesIO(exported.content))
        ws = wb.active
        assert ws.title == "applicants"
        assert ws["A1"].value == "Last Name"
        assert ws["A1"].font.bold
        assert ws["C2"].value == "smithj"
        table = ws.tables["applicants"]
        assert table.ref == "A1:F4"
        assert table.tableStyleInfo.name == "TableStyleMedium9"
        assert ws.column_dimensions["E"].width > 10

    def test_xlsx_without_records(self, schema):
        exported = export_records([], schema, "xlsx")
        wb = load_workbook(BytesIO(exported.content))
        assert wb.active.tables["applicants"].ref == "A1:F2"

    def test_csv(self, schema, applicants):
        exported = export_records(applicants, schema, "csv")
        lines = exported.content.decode("utf-8").splitlines()
        assert lines[0] == (
            "Last Name,First Name,UTORid,Student Number,email,Phone"
        )
        assert lines[3] == "Lee,Kim,leek,1000000003,kim.lee@example.com,"

    def test_json(self, schema, applicants):
        exported = export_records(applicants, schema, "json")
        assert exported.file_name == "export_applicants.json"
        assert exported.media_type == "application/json"
        data = json.loads(exported.content)
        assert data == to_structured(applicants, schema)

    def test_yaml(self, schema, applicants):
        exported = export_records(applicants, schema, "yaml")
        data = yaml.safe_load(exported.content)
        assert data["applicants"][1]["student_number"] == "1007654321"

    def test_unknown_format(self, schema, applicants):
        with pytest.raises(ValueError):
            export_records(applicants, schema, "pdf")  # type: ignore

    def test_save(self, schema, applicants, tmp_path):
        exported = export_records(applicants, schema, "json")
        path = tmp_path / exported.file_name
        exported.save(str(path))
        assert path.read_bytes() == exported.content


@pytest.mark.parametrize("data_format", ["xlsx", "csv", "json", "yaml"])
def test_export_then_import_is_unchanged(schema, applicants, data_format):
    exported = export_records(applicants, schema, data_format)
    payload = read_import_bytes(exported.content, exported.file_name)
    normalized = normalize_import(payload, schema)
    assert normalized.omissions == []
    assert len(normalized.records) == len(applicants)

    diff = compute_diff(normalized.records, applicants, schema)
    assert [d.status for d in diff] == [DiffStatus.UNCHANGED] * 3


def test_float_key_survives_csv_round_trip(schema):
    existing = [{"utorid": 1001.0, "first_name": "Pat"}]
    exported = export_records(existing, schema, "csv")
    assert b",1001.0," in exported.content

    payload = read_import_bytes(exported.content, exported.file_name)
    normalized = normalize_import(payload, schema)
    assert normalized.records[0]["utorid"] == "1001.0"
    diff = compute_diff(normalized.records, existing, schema)
    assert [d.status for d in diff] == [DiffStatus.UNCHANGED]


def test_xlsx_text_starting_with_equals_is_not_a_formula(schema):
    records = [{"utorid": "u1", "first_name": "=1+1"}]
    exported = export_records(records, schema, "xlsx")

    ws = load_workbook(BytesIO(exported.content)).active
    assert ws["B2"].data_type == "s"
    assert ws["B2"].value == "=1+1"

    payload = read_import_bytes(exported.content, exported.file_name)
    normalized = normalize_import(payload, schema)
    assert normalized.records == [{"utorid": "u1", "first_name": "=1+1"}]

import pytest

from recon_xl.errors import PrimaryKeyCollisionError
from recon_xl.ingest import (
    DiffBuilder,
    DiffStatus,
    FieldChange,
    compute_diff,
    summarize,
)


class TestComputeDiff:
    def test_new_record_is_kept_verbatim(self, schema, applicants):
        incoming = {"utorid": "newp", "first_name": "Pat", "extra": 1}
        (item,) = compute_diff([incoming], applicants, schema)
        assert item.status == DiffStatus.NEW
        assert item.obj == incoming
        assert item.changed_fields == {}
        assert item.existing is None

    def test_partial_update_keeps_other_fields(self, schema, applicants):
        incoming = {"utorid": "smithj", "email": "js@example.com"}
        (item,) = compute_diff([incoming], applicants, schema)
        assert item.status == DiffStatus.MODIFIED
        assert item.changed_fields == {
            "email": FieldChange(
                from_value="john.smith@example.com", to_value="js@example.com"
            )
        }
        assert item.obj["email"] == "js@example.com"
        assert item.obj["phone"] == "416-555-0101"
        assert item.obj["id"] == 1
        assert item.existing is applicants[0]

    def test_existing_records_are_not_mutated(self, schema, applicants):
        compute_diff(
            [{"utorid": "smithj", "email": "js@example.com"}],
            applicants,
            schema,
        )
        assert applicants[0]["email"] == "john.smith@example.com"

    def test_unchanged_after_type_coercion(self, schema, applicants):
        incoming = {
            "utorid": "smithj",
            "student_number": 1001234567,
            "first_name": " John ",
        }
        (item,) = compute_diff([incoming], applicants, schema)
        assert item.status == DiffStatus.UNCHANGED
        assert item.obj is applicants[0]
        assert not item.needs_write

    def test_blank_incoming_values_do_not_clear(self, schema, applicants):
        incoming = {"utorid": "smithj", "phone": "", "email": None}
        (item,) = compute_diff([incoming], applicants, schema)
        assert item.status == DiffStatus.UNCHANGED

    def test_filling_an_empty_field(self, schema, applicants):
        incoming = {"utorid": "leek", "phone": "416-555-0103"}
        (item,) = compute_diff([incoming], applicants, schema)
        assert item.status == DiffStatus.MODIFIED
        assert item.changed_fields["phone"].from_value is None

    def test_unknown_keys_are_not_compared(self, schema, applicants):
        incoming = {"utorid": "doej", "id": 99}
        (item,) = compute_diff([incoming], applicants, schema)
        assert item.status == DiffStatus.UNCHANGED

    def test_numeric_primary_key_matches(self, schema):
        existing = [{"utorid": "1001", "email": "a@example.com"}]
        (item,) = compute_diff([{"utorid": 1001}], existing, schema)
        assert item.status == DiffStatus.UNCHANGED

    def test_numeric_text_key_matches_number(self, schema):
        existing = [{"utorid": 1001, "email": "a@example.com"}]
        (item,) = compute_diff([{"utorid": "1001.0"}], existing, schema)
        assert item.status == DiffStatus.UNCHANGED
        assert item.existing is existing[0]

    def test_number_matches_numeric_text_key(self, schema):
        existing = [{"utorid": "1001.0", "email": "a@example.com"}]
        (item,) = compute_diff(
            [{"utorid": 1001, "email": "b@example.com"}], existing, schema
        )
        assert item.status == DiffStatus.MODIFIED
        assert item.obj["utorid"] == "1001.0"

    def test_text_keys_are_not_compared_as_numbers(self, schema):
        existing = [{"utorid": "1001"}]
        (item,) = compute_diff([{"utorid": "1001.0"}], existing, schema)
        assert item.status == DiffStatus.NEW

    def test_collision_between_number_and_numeric_text(self, schema):
        with pytest.raises(PrimaryKeyCollisionError):
            compute_diff(
                [{"utorid": "x"}],
                [{"utorid": 1001}, {"utorid": "1001.0"}],
                schema,
            )

    def test_order_is_preserved(self, schema, applicants):
        incoming = [
            {"utorid": "zz"},
            {"utorid": "leek"},
            {"utorid": "aa"},
            {"utorid": "doej", "phone": "1"},
        ]
        diff = compute_diff(incoming, applicants, schema)
        assert [d.status for d in diff] == [
            DiffStatus.NEW,
            DiffStatus.UNCHANGED,
            DiffStatus.NEW,
            DiffStatus.MODIFIED,
        ]
        assert [d.incoming["utorid"] for d in diff] == [
            "zz",
            "leek",
            "aa",
            "doej",
        ]

    def test_changes_follow_schema_order(self, schema, applicants):
        incoming = {
            "phone": "0",
            "email": "x@example.com",
            "utorid": "smithj",
            "first_name": "Jon",
        }
        (item,) = compute_diff([incoming], applicants, schema)
        assert list(item.changed_fields) == ["first_name", "email", "phone"]

    def test_duplicate_incoming_keys_are_diffed_independently(
        self, schema, applicants
    ):
        diff = compute_diff(
            [
                {"utorid": "doej", "phone": "1"},
                {"utorid": "doej", "phone": "2"},
            ],
            applicants,
            schema,
        )
        assert [d.changed_fields["phone"].from_value for d in diff] == [
            "416-555-0102",
            "416-555-0102",
        ]

    def test_collision_in_existing(self, schema, applicants):
        applicants.append({"utorid": "doej", "first_name": "Other"})
        with pytest.raises(PrimaryKeyCollisionError) as exc_info:
            compute_diff([{"utorid": "x"}], applicants, schema)
        assert exc_info.value.values == ("doej",)
        assert exc_info.value.primary_key == "utorid"

    def test_existing_without_primary_key_is_skipped(self, schema):
        existing = [{"email": "a@example.com"}]
        (item,) = compute_diff([{"utorid": "x"}], existing, schema)
        assert item.status == DiffStatus.NEW

    def test_empty_input(self, schema, applicants):
        assert compute_diff([], applicants, schema) == []


class TestHelpers:
    def test_summarize(self, schema, applicants):
        diff = compute_diff(
            [{"utorid": "x"}, {"utorid": "doej"}], applicants, schema
        )
        assert summarize(diff) == {"new": 1, "modified": 0, "unchanged": 1}

    def test_as_dict(self, schema, applicants):
        builder = DiffBuilder(schema, applicants)
        (modified,) = builder([{"utorid": "doej", "phone": "1"}])
        data = modified.as_dict()
        assert data["status"] == "modified"
        assert data["changedFields"] == {
            "phone": {"from": "416-555-0102", "to": "1"}
        }
        (new,) = builder([{"utorid": "x"}])
        assert new.as_dict() == {"status": "new", "obj": {"utorid": "x"}}

    def test_builder_reuses_lookup(self, schema, applicants):
        builder = DiffBuilder(schema, applicants)
        assert builder([{"utorid": "leek"}])[0].status == "unchanged"
        assert builder([{"utorid": "nobody"}])[0].status == "new"

import pytest

from recon_xl.errors import SchemaDefinitionError, UnknownSchemaError
from recon_xl.schema import RecordSchema, get_schema, register_schema


def make_schema(**kwargs):
    params = dict(
        name="thing",
        keys=("code", "label", "when"),
        key_map={"Code #": "code", "Title": "label"},
        primary_key="code",
        base_name="things",
    )
    params.update(kwargs)
    return RecordSchema(**params)


class TestResolveHeader:
    @pytest.mark.parametrize("header", ["Given Name", "First", "First Name"])
    def test_first_name_aliases(self, schema, header):
        assert schema.resolve_header(header) == "first_name"

    def test_canonical_key_is_accepted(self, schema):
        assert schema.resolve_header("utorid") == "utorid"
        assert schema.resolve_header("student_number") == "student_number"

    def test_case_and_whitespace_are_ignored(self, schema):
        assert schema.resolve_header("  first   NAME ") == "first_name"
        assert schema.resolve_header("UTORID") == "utorid"
        assert schema.resolve_header("Surname") == "last_name"

    def test_export_labels_resolve_back(self, schema):
        for key, label in schema.labels.items():
            assert schema.resolve_header(label) == key

    def test_unknown_headers_are_ignored(self, schema):
        assert schema.resolve_header("Favourite Colour") is None
        assert schema.resolve_header("") is None
        assert schema.resolve_header(None) is None


class TestDefinition:
    def test_primary_key_is_required(self):
        s = make_schema()
        assert s.required_keys == ("code",)

    def test_defaults_for_labels_and_minimal_keys(self):
        s = make_schema()
        assert s.export_keys() == ("code", "label", "when")
        assert s.export_labels() == ["code", "label", "when"]
        assert s.minimal_keys == ("code", "label", "when")

    def test_alias_to_unknown_key(self):
        with pytest.raises(SchemaDefinitionError):
            make_schema(key_map={"Other": "nope"})

    def test_unknown_primary_key(self):
        with pytest.raises(SchemaDefinitionError):
            make_schema(primary_key="id")

    def test_unknown_date_column(self):
        with pytest.raises(SchemaDefinitionError):
            make_schema(date_columns=("created_at",))

    def test_ambiguous_aliases(self):
        with pytest.raises(SchemaDefinitionError) as exc_info:
            make_schema(key_map={"Name": "code", "NAME": "label"})
        assert exc_info.value.schema_name == "thing"

    def test_label_resolving_elsewhere(self):
        with pytest.raises(SchemaDefinitionError):
            make_schema(labels={"code": "Title"})


class TestRegistry:
    def test_builtin_schemas(self):
        assert get_schema("applicant").base_name == "applicants"
        assert get_schema("instructor").primary_key == "utorid"

    def test_unknown_schema(self):
        with pytest.raises(UnknownSchemaError):
            get_schema("position")
        with pytest.raises(KeyError):
            get_schema("position")

    def test_conflicting_registration(self, schema):
        other = RecordSchema(
            name="applicant",
            keys=("utorid",),
            primary_key="utorid",
            base_name="applicants",
        )
        with pytest.raises(SchemaDefinitionError):
            register_schema(other)
        assert get_schema("applicant") is schema

    def test_registering_twice_is_allowed(self, schema):
        assert register_schema(schema) is schema

"""Instructor records."""

from recon_xl.schema import RecordSchema, register_schema

INSTRUCTOR_SCHEMA = register_schema(
    RecordSchema(
        name="instructor",
        keys=("first_name", "last_name", "utorid", "email"),
        key_map={
            "First Name": "first_name",
            "Given Name": "first_name",
            "First": "first_name",
            "Last Name": "last_name",
            "Surname": "last_name",
            "Family Name": "last_name",
            "Last": "last_name",
        },
        required_keys=("utorid",),
        primary_key="utorid",
        base_name="instructors",
        labels={
            "last_name": "Last Name",
            "first_name": "First Name",
            "utorid": "UTORid",
            "email": "email",
        },
    )
)

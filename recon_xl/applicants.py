"""Applicant records."""

from recon_xl.schema import RecordSchema, register_schema

APPLICANT_SCHEMA = register_schema(
    RecordSchema(
        name="applicant",
        keys=(
            "first_name",
            "last_name",
            "utorid",
            "email",
            "student_number",
            "phone",
        ),
        key_map={
            "First Name": "first_name",
            "Given Name": "first_name",
            "First": "first_name",
            "Last Name": "last_name",
            "Surname": "last_name",
            "Family Name": "last_name",
            "Last": "last_name",
            "Student Number": "student_number",
        },
        required_keys=("utorid",),
        primary_key="utorid",
        date_columns=(),
        base_name="applicants",
        labels={
            "last_name": "Last Name",
            "first_name": "First Name",
            "utorid": "UTORid",
            "student_number": "Student Number",
            "email": "email",
            "phone": "Phone",
        },
        minimal_keys=(
            "utorid",
            "student_number",
            "first_name",
            "last_name",
            "email",
            "phone",
        ),
    )
)

from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from clinic_api.errors import (
    Conflict,
    Internal,
    SLOT_TAKEN_MESSAGE,
    ValidationError,
    describe_storage_error,
    translate_storage_error,
)
from clinic_api.models import SLOT_CONSTRAINT_NAME


class FakePgError(Exception):
    def __init__(self, sqlstate, constraint_name=None, column_name=None):
        super().__init__(f"pg error {sqlstate}")
        self.sqlstate = sqlstate
        self.diag = SimpleNamespace(constraint_name=constraint_name, column_name=column_name)


def integrity_error(orig):
    return IntegrityError("INSERT ...", {}, orig)


@pytest.mark.parametrize(
    "sqlstate, error_cls",
    [
        ("23505", Conflict),
        ("23503", ValidationError),
        ("23502", ValidationError),
        ("22007", ValidationError),
        ("22008", ValidationError),
    ],
)
def test_known_sqlstates_are_translated(sqlstate, error_cls):
    error = translate_storage_error(integrity_error(FakePgError(sqlstate)))

    assert isinstance(error, error_cls)


def test_slot_constraint_gets_slot_message():
    error = translate_storage_error(
        integrity_error(FakePgError("23505", constraint_name=SLOT_CONSTRAINT_NAME)),
        duplicate_message="something else",
    )

    assert isinstance(error, Conflict)
    assert error.message == SLOT_TAKEN_MESSAGE


def test_other_unique_violation_uses_caller_message():
    error = translate_storage_error(
        integrity_error(FakePgError("23505", constraint_name="users_username_key")),
        duplicate_message="Username already exists",
    )

    assert error.message == "Username already exists"


def test_not_null_names_the_column():
    error = translate_storage_error(integrity_error(FakePgError("23502", column_name="date")))

    assert error.message == "Missing required field: date"


def test_datetime_format_message():
    error = translate_storage_error(integrity_error(FakePgError("22007")))

    assert "YYYY-MM-DD" in error.message
    assert "HH:MM:SS" in error.message


def test_unknown_code_is_internal():
    error = translate_storage_error(integrity_error(FakePgError("40001")))

    assert isinstance(error, Internal)
    assert error.status_code == 500


def test_sqlite_messages_are_recognized():
    unique = Exception(
        "UNIQUE constraint failed: appointments.date, appointments.start_time, "
        "appointments.service_type"
    )
    not_null = Exception("NOT NULL constraint failed: patients.last_name")

    assert describe_storage_error(integrity_error(unique)) == (
        "23505",
        SLOT_CONSTRAINT_NAME,
        None,
    )
    assert describe_storage_error(integrity_error(not_null)) == ("23502", None, "last_name")
    assert describe_storage_error(integrity_error(Exception("FOREIGN KEY constraint failed")))[0] == (
        "23503"
    )

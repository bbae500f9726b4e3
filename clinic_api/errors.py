"""
Error taxonomy shared by every domain service.

Services raise these; main.py renders them as {"error": ..., "details": [...]}.
Storage constraint violations that slip past the explicit pre-checks (two
requests racing for the same slot) are translated through STORAGE_ERROR_TABLE.
"""

import logging
import re
from typing import Optional

from sqlalchemy.exc import DBAPIError

from .models import SLOT_CONSTRAINT_NAME

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[list[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class NotFound(AppError):
    status_code = 404


class Conflict(AppError):
    status_code = 409


class Internal(AppError):
    status_code = 500


# PostgreSQL SQLSTATE codes we know how to explain to a caller
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
INVALID_DATETIME_FORMAT = "22007"
DATETIME_FIELD_OVERFLOW = "22008"

STORAGE_ERROR_TABLE = {
    UNIQUE_VIOLATION: (Conflict, "A duplicate entry already exists. Please check your data."),
    FOREIGN_KEY_VIOLATION: (ValidationError, "A referenced record does not exist."),
    NOT_NULL_VIOLATION: (ValidationError, "Missing required field: {column}"),
    INVALID_DATETIME_FORMAT: (
        ValidationError,
        "Invalid date or time format. Please ensure dates are in YYYY-MM-DD format "
        "and times are in HH:MM:SS format.",
    ),
    DATETIME_FIELD_OVERFLOW: (
        ValidationError,
        "Invalid date or time format. Please ensure dates are in YYYY-MM-DD format "
        "and times are in HH:MM:SS format.",
    ),
}

SLOT_TAKEN_MESSAGE = "This time slot is already booked for this service type. Please choose another time."

# Drivers without SQLSTATE (SQLite) only give us the message
_MESSAGE_PATTERNS = [
    (re.compile(r"unique constraint failed|duplicate key", re.IGNORECASE), UNIQUE_VIOLATION),
    (re.compile(r"foreign key constraint", re.IGNORECASE), FOREIGN_KEY_VIOLATION),
    (re.compile(r"not null constraint failed|null value in column", re.IGNORECASE), NOT_NULL_VIOLATION),
]
_SQLITE_NOT_NULL_COLUMN = re.compile(r"NOT NULL constraint failed: \w+\.(\w+)")
_SQLITE_UNIQUE_COLUMNS = re.compile(r"UNIQUE constraint failed: (.+)$")


def describe_storage_error(exc: DBAPIError) -> tuple[Optional[str], Optional[str], Optional[str]]:
    """Return (sqlstate, constraint name, column name) for a DBAPI failure"""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    diag = getattr(orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None) if diag else None
    column = getattr(diag, "column_name", None) if diag else None

    message = str(orig) if orig is not None else str(exc)
    if not code:
        for pattern, mapped in _MESSAGE_PATTERNS:
            if pattern.search(message):
                code = mapped
                break

    if code == NOT_NULL_VIOLATION and not column:
        match = _SQLITE_NOT_NULL_COLUMN.search(message)
        if match:
            column = match.group(1)

    if code == UNIQUE_VIOLATION and not constraint:
        match = _SQLITE_UNIQUE_COLUMNS.search(message)
        if match:
            columns = {part.strip().split(".")[-1] for part in match.group(1).split(",")}
            if columns == {"date", "start_time", "service_type"}:
                constraint = SLOT_CONSTRAINT_NAME

    return code, constraint, column


def translate_storage_error(
    exc: DBAPIError,
    duplicate_message: Optional[str] = None,
    foreign_key_message: Optional[str] = None,
) -> AppError:
    """Map a storage constraint violation onto the error taxonomy"""
    code, constraint, column = describe_storage_error(exc)
    logger.warning(
        f"⚠️ Storage constraint violation: code={code}, constraint={constraint}, column={column}"
    )

    if code not in STORAGE_ERROR_TABLE:
        logger.error(f"❌ Untranslated storage error: {exc}")
        return Internal("Internal server error")

    error_cls, message = STORAGE_ERROR_TABLE[code]
    if code == UNIQUE_VIOLATION:
        if constraint == SLOT_CONSTRAINT_NAME:
            message = SLOT_TAKEN_MESSAGE
        elif duplicate_message:
            message = duplicate_message
    elif code == FOREIGN_KEY_VIOLATION and foreign_key_message:
        message = foreign_key_message
    elif code == NOT_NULL_VIOLATION:
        message = message.format(column=column or "unknown field")

    return error_cls(message)

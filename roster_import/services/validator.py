from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..models.import_result import ErrorKind, ImportErrorRecord
from ..models.user_record import OPTIONAL_FIELDS, CanonicalUserRecord

"""Per-row validation of mapped user records.

validate_users is a pure function: it returns the accepted records and the
rejections as separate lists and never modifies its input. Checks run in a
fixed order and the first failing check rejects the row:

1. empty row
2. email required
3. phone number required
4. name synthesis (never rejects)
5. email format
6. normalization of accepted records
"""

__all__ = [
    "EMAIL_RE",
    "MSG_EMPTY_ROW",
    "MSG_EMAIL_REQUIRED",
    "MSG_PHONE_REQUIRED",
    "MSG_INVALID_EMAIL",
    "ValidationOutcome",
    "synthesize_names",
    "validate_users",
]

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MSG_EMPTY_ROW = "Row appears to be empty or contains no valid data"
MSG_EMAIL_REQUIRED = "Email is required"
MSG_PHONE_REQUIRED = "Phone number is required"
MSG_INVALID_EMAIL = "Invalid email format"


@dataclass(frozen=True)
class ValidationOutcome:
    valid_users: list[CanonicalUserRecord] = field(default_factory=list)
    errors: list[ImportErrorRecord] = field(default_factory=list)


def _blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def _email_local_part(email: str) -> str:
    return email.strip().split("@")[0]


def synthesize_names(user: CanonicalUserRecord) -> CanonicalUserRecord:
    """Fill in missing first/last names from the full name or the email.

    john.doe@example.com -> first="john", last="doe"
    first_name "Matthew T Cianciolo" with no last name -> "Matthew", "T Cianciolo"
    """
    first = user.first_name
    last = user.last_name
    local = _email_local_part(user.email)

    if _blank(first):
        first = local.split(".")[0] or local or "User"

    if _blank(last):
        if " " in first:
            parts = first.split()
            if len(parts) >= 2:
                first = parts[0]
                last = " ".join(parts[1:])
                logger.debug("split name %r -> %r %r", user.first_name, first, last)
            else:
                last = "User"
        else:
            segments = local.split(".")
            last = segments[1] if len(segments) > 1 and segments[1] else "User"
            logger.debug("generated last name from email: %r", last)

    return user.with_values(first_name=first, last_name=last)


def _normalize(user: CanonicalUserRecord, row: int) -> CanonicalUserRecord:
    optional: dict[str, str | None] = {}
    for name in OPTIONAL_FIELDS:
        value = getattr(user, name)
        optional[name] = None if _blank(value) else value.strip()
    return user.with_values(
        first_name=user.first_name.strip(),
        last_name=user.last_name.strip(),
        email=user.email.strip().lower(),
        source_row=row,
        **optional,
    )


def validate_users(users: Sequence[CanonicalUserRecord]) -> ValidationOutcome:
    """Partition records into accepted and rejected; row number = index + 2."""
    valid: list[CanonicalUserRecord] = []
    errors: list[ImportErrorRecord] = []

    def reject(row: int, email: str | None, message: str, original: CanonicalUserRecord) -> None:
        logger.debug("row %d rejected: %s", row, message)
        errors.append(
            ImportErrorRecord(
                row=row,
                email=email,
                error=message,
                data=original.as_dict(include_extras=True),
                kind=ErrorKind.VALIDATION,
            )
        )

    for index, user in enumerate(users):
        row = index + 2

        if not user.has_any_data():
            reject(row, None, MSG_EMPTY_ROW, user)
            continue

        if _blank(user.email):
            reject(row, None, MSG_EMAIL_REQUIRED, user)
            continue

        if _blank(user.phone_number):
            reject(row, user.email, MSG_PHONE_REQUIRED, user)
            continue

        named = synthesize_names(user)

        if not EMAIL_RE.match(named.email.strip()):
            reject(row, user.email, MSG_INVALID_EMAIL, user)
            continue

        valid.append(_normalize(named, row))

    logger.debug("validation: valid=%d rejected=%d", len(valid), len(errors))
    return ValidationOutcome(valid_users=valid, errors=errors)

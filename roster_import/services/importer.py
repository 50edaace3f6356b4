from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from ..models.import_result import ErrorKind, ImportedUser, ImportErrorRecord, ImportResult
from ..models.user_record import CanonicalUserRecord
from ..store.base import DataStore
from .validator import validate_users

"""Importer: validated user records -> store rows.

import_users is the only step that talks to the store. It validates, looks up
existing identity keys in one batched call, and inserts the remaining records
in one batched call. Data and store failures are reported in the returned
ImportResult; only an unsupported identity key raises.

The lookup always completes before the insert, but nothing coordinates two
concurrent imports with overlapping emails.
"""

__all__ = [
    "MSG_DUPLICATE",
    "STORED_FIELDS",
    "INTEREST_FIELDS",
    "IDENTITY_KEYS",
    "build_storage_row",
    "import_users",
    "list_imported_users",
]

logger = logging.getLogger(__name__)

MSG_DUPLICATE = "User already exists"

STORED_FIELDS: tuple[str, ...] = (
    "phone_number",
    "title_position",
    "organization_affiliation",
    "t_shirt_size",
    "dietary_restrictions",
    "accessibility_needs",
    "bio",
)

INTEREST_FIELDS: tuple[str, ...] = ("professional_interests", "community_interests")

# required fields, so every valid record carries a value
IDENTITY_KEYS: tuple[str, ...] = ("email", "phone_number")


def build_storage_row(
    user: CanonicalUserRecord, timestamp: str, persist_interest_fields: bool = True
) -> dict[str, Any]:
    """Storage representation of a validated user; absent optional fields become None."""
    row: dict[str, Any] = {
        "name": f"{user.first_name} {user.last_name}".strip(),
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
    }
    for name in STORED_FIELDS:
        row[name] = getattr(user, name) or None
    if persist_interest_fields:
        for name in INTEREST_FIELDS:
            row[name] = getattr(user, name) or None
    row["created_at"] = timestamp
    row["updated_at"] = timestamp
    return row


def _failed(total: int, errors: list[ImportErrorRecord]) -> ImportResult:
    return ImportResult(
        success=False,
        total_rows=total,
        successful_imports=0,
        failed_imports=total,
        errors=errors,
        imported_users=[],
    )


async def import_users(
    users: Sequence[CanonicalUserRecord],
    store: DataStore,
    *,
    key: str = "email",
    persist_interest_fields: bool = True,
) -> ImportResult:
    """Validate, de-duplicate against the store and insert new users.

    Args:
        users: mapped records in CSV order (row number = index + 2)
        store: store used for the existing-key lookup and the insert
        key: identity field used for duplicate detection (one of IDENTITY_KEYS)
        persist_interest_fields: also write professional/community interests

    Returns:
        ImportResult with successful_imports + failed_imports == len(users)

    Raises:
        ValueError: `key` is not an identity field
    """
    if key not in IDENTITY_KEYS:
        raise ValueError(f"unsupported identity key: {key!r}")

    total = len(users)
    outcome = validate_users(users)
    errors: list[ImportErrorRecord] = list(outcome.errors)
    valid = outcome.valid_users
    logger.debug("valid=%d validation_errors=%d", len(valid), len(errors))

    if not valid:
        logger.info("no valid users found; all %d rows failed", total)
        return _failed(total, errors)

    try:
        values = [getattr(u, key) for u in valid]
        existing_rows = await store.find_by_key(key, values)
        existing = {r.get(key) for r in existing_rows}

        new_users = [u for u in valid if getattr(u, key) not in existing]
        duplicates = [u for u in valid if getattr(u, key) in existing]
        logger.debug("new=%d duplicates=%d", len(new_users), len(duplicates))

        for user in duplicates:
            row = user.source_row or 0
            original = users[row - 2] if row >= 2 else user
            errors.append(
                ImportErrorRecord(
                    row=row,
                    email=user.email,
                    error=MSG_DUPLICATE,
                    data=original.as_dict(include_extras=True),
                    kind=ErrorKind.DUPLICATE,
                )
            )

        if not new_users:
            return _failed(total, errors)

        timestamp = datetime.now(UTC).isoformat()
        rows = [build_storage_row(u, timestamp, persist_interest_fields) for u in new_users]
        inserted = await store.insert_batch(rows)
        imported = [ImportedUser.from_row(r) for r in inserted]
        successful = len(inserted)
    except Exception as e:
        logger.error("import failed: %s", e)
        errors.append(
            ImportErrorRecord(
                row=0,
                email=None,
                error=f"Import failed: {e}",
                data=None,
                kind=ErrorKind.STORE,
            )
        )
        # nothing counts as imported once the batch failed
        return _failed(total, errors)

    return ImportResult(
        success=successful > 0,
        total_rows=total,
        successful_imports=successful,
        failed_imports=total - successful,
        errors=errors,
        imported_users=imported,
    )


async def list_imported_users(store: DataStore) -> list[ImportedUser]:
    """Users in the store, newest first; status defaults to pending.

    Raises:
        StoreError: the store could not be read
    """
    rows = await store.list_users(order_by="created_at", desc=True)
    logger.debug("listed %d users", len(rows))
    return [ImportedUser.from_row(r) for r in rows]

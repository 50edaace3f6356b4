from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Import result models returned by the importer.

ImportResult is built once per import call and never mutated afterwards.
Every failure mode below the importer boundary ends up as an
ImportErrorRecord in `errors`, so callers always receive structured data.
"""

__all__ = [
    "ErrorKind",
    "ImportErrorRecord",
    "ImportedUser",
    "ImportResult",
]


class ErrorKind(Enum):
    """Classification of a rejected row.

    - VALIDATION: missing required field, bad email format, empty row
    - DUPLICATE: identity key already present in the store
    - STORE: lookup/insert failed; reported once with row 0
    """
    VALIDATION = "validation"
    DUPLICATE = "duplicate"
    STORE = "store"


@dataclass(frozen=True)
class ImportErrorRecord:
    """One rejected row (or one synthetic store failure with row=0)."""
    row: int
    email: str | None
    error: str
    data: dict[str, Any] | None = None  # record as it looked before validation
    kind: ErrorKind = ErrorKind.VALIDATION

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"row": self.row}
        if self.email is not None:
            out["email"] = self.email
        out["error"] = self.error
        if self.data is not None:
            out["data"] = self.data
        return out


@dataclass(frozen=True)
class ImportedUser:
    """A row created in the store by this import."""
    id: Any
    email: str
    first_name: str
    last_name: str
    status: str
    created_at: Any

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ImportedUser:
        # The users table has no status column yet; freshly imported users are pending.
        return cls(
            id=row.get("id"),
            email=row.get("email", ""),
            first_name=row.get("first_name", ""),
            last_name=row.get("last_name", ""),
            status=row.get("status") or "pending",
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "status": self.status,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class ImportResult:
    """Aggregate outcome of one import call.

    Invariant: successful_imports + failed_imports == total_rows.
    """
    success: bool
    total_rows: int
    successful_imports: int
    failed_imports: int
    errors: list[ImportErrorRecord] = field(default_factory=list)
    imported_users: list[ImportedUser] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Render the caller-facing camelCase shape."""
        return {
            "success": self.success,
            "totalRows": self.total_rows,
            "successfulImports": self.successful_imports,
            "failedImports": self.failed_imports,
            "errors": [e.to_dict() for e in self.errors],
            "importedUsers": [u.to_dict() for u in self.imported_users],
        }

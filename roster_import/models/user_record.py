from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any

"""Canonical user record and field mapping models.

CanonicalUserRecord is the closed record shape produced by the field mapper and
refined by the validator. Unrecognized source columns travel in `extras` so the
canonical attributes stay typed; extras are never persisted.
"""

__all__ = [
    "CANONICAL_FIELDS",
    "OPTIONAL_FIELDS",
    "REQUIRED_SHAPE_FIELDS",
    "FieldMapping",
    "CanonicalUserRecord",
]

# Always present on a mapped record (default "")
REQUIRED_SHAPE_FIELDS: tuple[str, ...] = ("first_name", "last_name", "email")

# Present only when a value was found (None = absent)
OPTIONAL_FIELDS: tuple[str, ...] = (
    "phone_number",
    "title_position",
    "organization_affiliation",
    "t_shirt_size",
    "dietary_restrictions",
    "accessibility_needs",
    "bio",
    "professional_interests",
    "community_interests",
)

CANONICAL_FIELDS: tuple[str, ...] = REQUIRED_SHAPE_FIELDS + OPTIONAL_FIELDS


@dataclass(frozen=True)
class FieldMapping:
    """User supplied mapping of one CSV column onto one canonical field.

    csv_column is the label as the user sees it ("Phone Number"); the mapper
    normalizes it the same way the parser normalizes headers.
    """
    csv_column: str
    user_field: str
    required: bool = False


@dataclass(frozen=True)
class CanonicalUserRecord:
    """Mapped user row with a fixed set of canonical fields."""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone_number: str | None = None
    title_position: str | None = None
    organization_affiliation: str | None = None
    t_shirt_size: str | None = None
    dietary_restrictions: str | None = None
    accessibility_needs: str | None = None
    bio: str | None = None
    professional_interests: str | None = None
    community_interests: str | None = None
    extras: dict[str, str] = field(default_factory=dict)  # unrecognized source columns
    source_row: int | None = None  # set on acceptance by the validator

    @classmethod
    def from_values(
        cls, values: dict[str, Any], extras: dict[str, str] | None = None
    ) -> CanonicalUserRecord:
        """Build a record from a canonical-field dict; unknown keys go to extras."""
        known: dict[str, Any] = {}
        unknown: dict[str, str] = dict(extras or {})
        for key, value in values.items():
            if key in CANONICAL_FIELDS:
                known[key] = value
            else:
                unknown[key] = value
        return cls(**known, extras=unknown)

    def get(self, name: str) -> str | None:
        if name in CANONICAL_FIELDS:
            return getattr(self, name)
        return self.extras.get(name)

    def with_values(self, **changes: Any) -> CanonicalUserRecord:
        return replace(self, **changes)

    def has_any_data(self) -> bool:
        """True when at least one canonical field holds a non-blank value."""
        for name in CANONICAL_FIELDS:
            value = getattr(self, name)
            if value is not None and str(value).strip() != "":
                return True
        return False

    def as_dict(self, include_extras: bool = False) -> dict[str, Any]:
        """Canonical view: required-shape fields always, optional fields when present."""
        out: dict[str, Any] = {}
        for f in fields(self):
            if f.name in ("extras", "source_row"):
                continue
            value = getattr(self, f.name)
            if f.name in REQUIRED_SHAPE_FIELDS or value is not None:
                out[f.name] = value
        if include_extras:
            for key, value in self.extras.items():
                out.setdefault(key, value)
        return out

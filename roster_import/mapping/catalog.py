from __future__ import annotations

from dataclasses import dataclass

from .aliases import aliases_for

"""Catalog of canonical user fields offered as mapping targets."""

__all__ = [
    "FieldInfo",
    "available_fields",
]


@dataclass(frozen=True)
class FieldInfo:
    field: str
    label: str
    required: bool

    @property
    def aliases(self) -> tuple[str, ...]:
        """CSV column keys that auto-map onto this field."""
        return tuple(aliases_for(self.field))


_FIELDS: tuple[FieldInfo, ...] = (
    FieldInfo("email", "Email", True),
    FieldInfo("phone_number", "Phone Number", True),
    FieldInfo("first_name", "First Name (auto-generated if missing)", False),
    FieldInfo("last_name", "Last Name (auto-generated if missing)", False),
    FieldInfo("title_position", "Title/Position", False),
    FieldInfo("organization_affiliation", "Organization", False),
    FieldInfo("t_shirt_size", "T-Shirt Size", False),
    FieldInfo("dietary_restrictions", "Dietary Restrictions", False),
    FieldInfo("accessibility_needs", "Accessibility Needs", False),
    FieldInfo("bio", "Bio", False),
    FieldInfo("professional_interests", "Professional Interests", False),
    FieldInfo("community_interests", "Community Interests", False),
)


def available_fields() -> list[FieldInfo]:
    """Canonical fields in display order with label and required flag."""
    return list(_FIELDS)

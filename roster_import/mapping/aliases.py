from __future__ import annotations

from collections.abc import Callable

"""Heuristic column aliases used when no explicit field mapping is configured.

AUTO_MAPPINGS is order sensitive: for each canonical field the first alias
present with a value wins. PARTIAL_MATCHERS is the second pass for the three
name/email fields, applied to normalized header keys in record order.
"""

__all__ = [
    "AUTO_MAPPINGS",
    "PARTIAL_MATCHERS",
    "aliases_for",
]

# (normalized csv key, canonical field)
AUTO_MAPPINGS: tuple[tuple[str, str], ...] = (
    # first name
    ("first_name", "first_name"),
    ("firstname", "first_name"),
    ("fname", "first_name"),
    ("first", "first_name"),
    ("given_name", "first_name"),
    ("givenname", "first_name"),
    # last name
    ("last_name", "last_name"),
    ("lastname", "last_name"),
    ("lname", "last_name"),
    ("last", "last_name"),
    ("surname", "last_name"),
    ("family_name", "last_name"),
    ("familyname", "last_name"),
    # email
    ("email", "email"),
    ("email_address", "email"),
    ("e_mail", "email"),
    ("mail", "email"),
    # phone
    ("phone", "phone_number"),
    ("phone_number", "phone_number"),
    ("mobile", "phone_number"),
    ("cell", "phone_number"),
    ("telephone", "phone_number"),
    # title / position
    ("title", "title_position"),
    ("title_position", "title_position"),
    ("position", "title_position"),
    ("job_title", "title_position"),
    ("jobtitle", "title_position"),
    ("role", "title_position"),
    # organization
    ("organization", "organization_affiliation"),
    ("organization_affiliation", "organization_affiliation"),
    ("company", "organization_affiliation"),
    ("employer", "organization_affiliation"),
    ("workplace", "organization_affiliation"),
    # t-shirt size
    ("t_shirt_size", "t_shirt_size"),
    ("tshirt_size", "t_shirt_size"),
    ("shirt_size", "t_shirt_size"),
    ("tshirtsize", "t_shirt_size"),
    ("size", "t_shirt_size"),
    # other
    ("dietary_restrictions", "dietary_restrictions"),
    ("dietary", "dietary_restrictions"),
    ("diet", "dietary_restrictions"),
    ("accessibility_needs", "accessibility_needs"),
    ("accessibility", "accessibility_needs"),
    ("bio", "bio"),
    ("biography", "bio"),
    ("about", "bio"),
    ("professional_interests", "professional_interests"),
    ("interests", "professional_interests"),
    ("community_interests", "community_interests"),
)


def _contains_any(*needles: str) -> Callable[[str], bool]:
    def predicate(key: str) -> bool:
        return any(n in key for n in needles)
    return predicate


# (canonical field, predicate on normalized csv key)
PARTIAL_MATCHERS: tuple[tuple[str, Callable[[str], bool]], ...] = (
    ("first_name", _contains_any("first", "given")),
    ("last_name", _contains_any("last", "surname", "family")),
    ("email", _contains_any("email", "mail")),
)


def aliases_for(user_field: str) -> list[str]:
    """Aliases that auto-map onto `user_field`, in priority order."""
    return [alias for alias, target in AUTO_MAPPINGS if target == user_field]

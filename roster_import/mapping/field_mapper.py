from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from ..models.user_record import CanonicalUserRecord, FieldMapping
from ..parsing.csv_reader import normalize_header
from .aliases import AUTO_MAPPINGS, PARTIAL_MATCHERS

"""Field mapper: raw CSV records -> canonical user records.

Explicit mappings win outright. Without any, the alias table is applied,
followed by a substring pass for first/last name and email when those are
still unset. One output record per input record, same order.
"""

__all__ = [
    "map_fields",
    "map_record",
    "auto_map_record",
    "apply_field_mappings",
]

logger = logging.getLogger(__name__)

_KNOWN_ALIASES = frozenset(alias for alias, _ in AUTO_MAPPINGS)


def _has_value(value: str | None) -> bool:
    return value is not None and value != ""


def apply_field_mappings(
    raw: Mapping[str, str], mappings: Iterable[FieldMapping]
) -> CanonicalUserRecord:
    """Map one raw record using explicit user mappings."""
    values: dict[str, str] = {"first_name": "", "last_name": "", "email": ""}
    used: set[str] = set()
    for mapping in mappings:
        key = normalize_header(mapping.csv_column)
        value = raw.get(key)
        logger.debug(
            "mapping %r -> %r = %r -> %r", mapping.csv_column, key, value, mapping.user_field
        )
        if _has_value(value):
            values[mapping.user_field] = value  # type: ignore[assignment]
            used.add(key)
    extras = {k: v for k, v in raw.items() if k not in used}
    return CanonicalUserRecord.from_values(values, extras=extras)


def auto_map_record(raw: Mapping[str, str]) -> CanonicalUserRecord:
    """Map one raw record using the alias table and the partial-match fallback."""
    values: dict[str, str] = {"first_name": "", "last_name": "", "email": ""}
    matched: set[str] = set()
    used: set[str] = set()

    for alias, user_field in AUTO_MAPPINGS:
        if user_field in matched:
            continue
        value = raw.get(alias)
        if _has_value(value):
            values[user_field] = value  # type: ignore[assignment]
            matched.add(user_field)
            used.add(alias)

    if not (values["first_name"] and values["last_name"] and values["email"]):
        for key, value in raw.items():
            if not _has_value(value):
                continue
            for user_field, predicate in PARTIAL_MATCHERS:
                if not values[user_field] and predicate(key):
                    logger.debug("partial match %s: %r = %r", user_field, key, value)
                    values[user_field] = value
                    used.add(key)

    extras = {k: v for k, v in raw.items() if k not in used and k not in _KNOWN_ALIASES}
    return CanonicalUserRecord.from_values(values, extras=extras)


def map_record(
    raw: Mapping[str, str], mappings: Sequence[FieldMapping] | None = None
) -> CanonicalUserRecord:
    if mappings:
        return apply_field_mappings(raw, mappings)
    return auto_map_record(raw)


def map_fields(
    records: Iterable[Mapping[str, str]], mappings: Sequence[FieldMapping] | None = None
) -> list[CanonicalUserRecord]:
    """Map every record; an empty/None mapping set switches to auto-mapping."""
    mode = "explicit" if mappings else "auto"
    mapped = [map_record(raw, mappings) for raw in records]
    logger.debug("mapped %d records (%s mapping)", len(mapped), mode)
    return mapped

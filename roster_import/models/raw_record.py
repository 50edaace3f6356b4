from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

"""RawRecord model for the CSV parser output.

A RawRecord is one parsed CSV data row: normalized header key -> trimmed,
non-empty string value. Empty cells are never stored, so an absent key and an
empty cell look the same to the mapper.
"""

__all__ = [
    "RawRecord",
]


@dataclass(frozen=True)
class RawRecord(Mapping[str, str]):
    """Logical representation of a single CSV data row after header normalization.

    row_number is the 1-based position used in error reports: index + 2
    (the header line occupies row 1).
    """
    row_number: int
    data: dict[str, str] = field(default_factory=dict)

    def __getitem__(self, key: str) -> str:
        return self.data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

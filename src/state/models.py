from __future__ import annotations

from typing import Any, Dict, Iterator, Tuple

from pydantic import BaseModel, ConfigDict


ROW_COUNT = 60
COLUMNS: Tuple[str, ...] = ("L", "A", "M", "I", "S")
STORAGE_KEY = "lamis_data"

_ROW_PREFIX = "row_"

# Mapping of "row_<N>" keys to raw row entries. Entries are kept verbatim so
# hand-edited or foreign payloads survive an import untouched; readers go
# through `RowFlags.from_raw`.
GridState = Dict[str, Any]


def row_key(row: int) -> str:
    return f"{_ROW_PREFIX}{row}"


def iter_rows() -> Iterator[int]:
    return iter(range(1, ROW_COUNT + 1))


class RowFlags(BaseModel):
    """
    The five boolean flags of one row.

    Fields
    - L, A, M, I, S: one flag per column, all False for a row never touched.

    Notes
    - A row absent from the grid reads as `RowFlags()`.
    - Once a row is written it is always stored with all five keys.
    """

    model_config = ConfigDict(frozen=True)

    L: bool = False
    A: bool = False
    M: bool = False
    I: bool = False  # noqa: E741
    S: bool = False

    @classmethod
    def from_raw(cls, raw: Any) -> "RowFlags":
        """Read flags from a stored entry, treating anything unexpected as False."""
        if not isinstance(raw, dict):
            return cls()
        return cls(**{col: raw.get(col) is True for col in COLUMNS})

    def get(self, column: str) -> bool:
        return bool(getattr(self, column))

    def flipped(self, column: str) -> "RowFlags":
        return self.model_copy(update={column: not self.get(column)})

    def to_dict(self) -> Dict[str, bool]:
        return {col: self.get(col) for col in COLUMNS}


__all__ = [
    "COLUMNS",
    "GridState",
    "ROW_COUNT",
    "RowFlags",
    "STORAGE_KEY",
    "iter_rows",
    "row_key",
]

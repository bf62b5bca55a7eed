from __future__ import annotations

import copy
from typing import Iterator, Optional, Tuple

from state.models import COLUMNS, GridState, RowFlags, iter_rows, row_key

from .dirty import DirtyTracker, check_row
from .errors import InvalidArgument


def check_column(column: str) -> str:
    if column not in COLUMNS:
        raise InvalidArgument(f"column must be one of {', '.join(COLUMNS)}, got {column!r}")
    return column


class GridStore:
    """
    In-memory grid of 60 rows by 5 boolean columns.

    Rows are materialized lazily: a row never written is absent from the
    mapping and reads as all-False. Toggling a row writes it back with all
    five flags and marks it dirty on the attached DirtyTracker.
    """

    def __init__(self, state: Optional[GridState] = None, *, dirty: Optional[DirtyTracker] = None) -> None:
        self._state: GridState = copy.deepcopy(state) if state else {}
        self._dirty = dirty if dirty is not None else DirtyTracker()

    @property
    def dirty(self) -> DirtyTracker:
        return self._dirty

    def flags(self, row: int) -> RowFlags:
        check_row(row)
        return RowFlags.from_raw(self._state.get(row_key(row)))

    def rows(self) -> Iterator[Tuple[int, RowFlags]]:
        for n in iter_rows():
            yield n, self.flags(n)

    def toggle(self, row: int, column: str) -> RowFlags:
        """Flip one cell and return the row's updated flags."""
        check_row(row)
        check_column(column)
        updated = self.flags(row).flipped(column)
        self._state[row_key(row)] = updated.to_dict()
        self._dirty.mark_dirty(row)
        return updated

    def replace_all(self, new_state: GridState) -> None:
        """Swap in a whole new grid in one step; toggles made before are discarded."""
        if not isinstance(new_state, dict):
            raise InvalidArgument("grid state must be a mapping")
        self._state = copy.deepcopy(new_state)

    def snapshot(self) -> GridState:
        """Point-in-time copy; later toggles do not reach it."""
        return copy.deepcopy(self._state)

    def __len__(self) -> int:
        return len(self._state)


__all__ = ["GridStore", "check_column"]

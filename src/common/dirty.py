from __future__ import annotations

from typing import FrozenSet, Iterable, Set

from state.models import ROW_COUNT

from .errors import InvalidArgument


def check_row(row: int) -> int:
    if isinstance(row, bool) or not isinstance(row, int) or not 1 <= row <= ROW_COUNT:
        raise InvalidArgument(f"row must be an integer in 1..{ROW_COUNT}, got {row!r}")
    return row


class DirtyView:
    """Read-only window onto a DirtyTracker, handed to presentation code."""

    def __init__(self, tracker: "DirtyTracker") -> None:
        self._tracker = tracker

    def is_dirty(self, row: int) -> bool:
        return self._tracker.is_dirty(row)

    def count(self) -> int:
        return self._tracker.count()

    def rows(self) -> FrozenSet[int]:
        return self._tracker.rows()


class DirtyTracker:
    """
    Rows changed in memory since they were last durably saved.

    - Process-local; never persisted.
    - `mark_dirty` is idempotent.
    - A per-row save control is shown iff `is_dirty(row)`, a "Save All"
      control iff `count() > 0`.
    """

    def __init__(self, rows: Iterable[int] = ()) -> None:
        self._rows: Set[int] = {check_row(r) for r in rows}

    def mark_dirty(self, row: int) -> None:
        self._rows.add(check_row(row))

    def clear(self, row: int) -> None:
        self._rows.discard(check_row(row))

    def clear_all(self) -> None:
        self._rows.clear()

    def is_dirty(self, row: int) -> bool:
        return row in self._rows

    def count(self) -> int:
        return len(self._rows)

    def rows(self) -> FrozenSet[int]:
        return frozenset(self._rows)

    def view(self) -> DirtyView:
        return DirtyView(self)


__all__ = ["DirtyTracker", "DirtyView", "check_row"]

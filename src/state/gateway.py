from __future__ import annotations

import json
from typing import Any, Optional, Protocol, runtime_checkable

from common.errors import PersistenceError

from .models import GridState


@runtime_checkable
class PersistenceGateway(Protocol):
    """Durable home of the single grid record.

    - `load()` returns the stored GridState, or None when nothing was saved yet.
    - `save(state)` overwrites the whole record in place.
    Both raise `PersistenceError` on failure.
    """

    def load(self) -> Optional[GridState]: ...

    def save(self, state: GridState) -> None: ...


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {token}")


def strict_loads(text: str | bytes) -> Any:
    """`json.loads` that refuses NaN, Infinity and -Infinity like JSON.parse does."""
    return json.loads(text, parse_constant=_reject_constant)


def dump_grid_json(state: GridState) -> bytes:
    # Deterministic JSON: stable key order, no extra whitespace, standard JSON only
    return json.dumps(state, separators=(",", ":"), sort_keys=True, allow_nan=False).encode("utf-8")


def load_grid_json(data: bytes) -> GridState:
    try:
        raw = strict_loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as ex:
        raise PersistenceError("Stored grid record is not valid JSON") from ex
    if not isinstance(raw, dict):
        raise PersistenceError("Stored grid record is not a JSON object")
    return raw


__all__ = ["PersistenceGateway", "dump_grid_json", "load_grid_json", "strict_loads"]

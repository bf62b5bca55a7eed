from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from common.errors import PersistenceError

from .gateway import dump_grid_json, load_grid_json
from .models import STORAGE_KEY, GridState


ENV_STATE_DIR = "LAMIS_STATE_DIR"


def _default_state_dir() -> Path:
    # Prefer explicit env var, else project-local .lamis folder
    base = os.environ.get(ENV_STATE_DIR)
    if base:
        return Path(base)
    return Path(".lamis")


class JsonFileStore:
    """
    Local persistence for the grid as one JSON file.

    - Backed by `<state_dir>/<key>.json`; the key defaults to "lamis_data".
    - `save()` writes a sibling temp file and swaps it in with `os.replace`,
      so a crash mid-write leaves the previous record intact.
    - A missing file loads as None (first run).
    """

    def __init__(self, state_dir: Optional[os.PathLike[str] | str] = None, *, key: str = STORAGE_KEY) -> None:
        self._dir = Path(state_dir) if state_dir else _default_state_dir()
        self._key = key

    @property
    def path(self) -> Path:
        return self._dir / f"{self._key}.json"

    def load(self) -> Optional[GridState]:
        try:
            data = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as ex:
            raise PersistenceError(f"Failed to read {self.path}: {ex}") from ex
        return load_grid_json(data)

    def save(self, state: GridState) -> None:
        target = self.path
        tmp = target.with_name(f"{target.name}.tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(dump_grid_json(state))
            os.replace(tmp, target)
        except (OSError, TypeError, ValueError) as ex:
            raise PersistenceError(f"Failed to write {target}: {ex}") from ex


__all__ = ["JsonFileStore", "ENV_STATE_DIR"]

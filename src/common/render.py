from __future__ import annotations

from typing import Optional

from state.models import COLUMNS

from .dirty import DirtyView
from .grid import GridStore


_CHECKED = "[x]"
_UNCHECKED = "[ ]"


def save_all_label(dirty: DirtyView) -> Optional[str]:
    """Label of the bulk save control, or None when there is nothing to save."""
    n = dirty.count()
    return f"Save All ({n})" if n > 0 else None


def format_grid(grid: GridStore, dirty: DirtyView) -> str:
    """Return the whole grid as a plain-text table.

    One line per row: row number, the five checkboxes, and a "Save" marker
    on rows with unsaved changes. The header carries the "Save All (N)"
    label when any row is dirty.
    """
    title = "LAMIS"
    label = save_all_label(dirty)
    if label:
        title = f"{title}    {label}"

    header = "    " + " ".join(f" {c} " for c in COLUMNS)
    lines = [title, header]
    for n, flags in grid.rows():
        cells = " ".join(_CHECKED if flags.get(c) else _UNCHECKED for c in COLUMNS)
        marker = "  Save" if dirty.is_dirty(n) else ""
        lines.append(f"{n:>3} {cells}{marker}")
    return "\n".join(lines)


def format_export_success(filename: Optional[str]) -> str:
    name = filename or "LAMIS data"
    parts = [
        "Exported to Clipboard!",
        f"Your LAMIS data has been copied to clipboard as {name}.",
        "",
        "Next steps:",
        "1. Open any text app (Notes, Files, etc.)",
        "2. Paste the data",
        "3. Save as .json file to Downloads",
    ]
    return "\n".join(parts)


def format_import_prompt(filename: Optional[str]) -> str:
    return "\n".join(
        [
            "Import LAMIS Data",
            f"Found {filename or 'LAMIS data'}.",
            "",
            "This will replace all current data.",
            "Continue with import?",
        ]
    )


def format_import_success(persisted: bool, error: Optional[str] = None) -> str:
    if persisted:
        return "Import Successful! Your LAMIS data has been imported and saved to your device."
    # In-memory replacement already happened; only the durable save failed
    detail = f" ({error})" if error else ""
    return f"Import Error: data was imported but failed to save{detail}. Save again to retry."


def format_error(title: str, message: str) -> str:
    return f"{title}: {message}"


__all__ = [
    "format_error",
    "format_export_success",
    "format_grid",
    "format_import_prompt",
    "format_import_success",
    "save_all_label",
]

"""
Core building blocks of the LAMIS grid tracker.

Modules:
- grid: in-memory grid store (toggle, wholesale replace, snapshot)
- dirty: rows with unsaved changes
- codec: exchange envelope encode/decode with import validation
- transfer: text channels used to move envelopes in and out
- render: plain-text grid and user-facing messages
- errors: error taxonomy
"""

__all__ = [
    "codec",
    "dirty",
    "errors",
    "grid",
    "render",
    "transfer",
]

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional, Protocol, TextIO, runtime_checkable

from .errors import TransferError


@runtime_checkable
class TransferChannel(Protocol):
    """Text medium used to move an exchange envelope in or out (e.g., a clipboard)."""

    def write_text(self, text: str) -> None: ...

    def read_text(self) -> str: ...


class MemoryChannel:
    """In-process clipboard; holds the last written text."""

    def __init__(self, text: str = "") -> None:
        self.text = text

    def write_text(self, text: str) -> None:
        self.text = text

    def read_text(self) -> str:
        return self.text


class FileChannel:
    """
    A text file standing in for the clipboard.

    Reading a missing file yields "" so the caller reports an empty channel.
    """

    def __init__(self, path: os.PathLike[str] | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def write_text(self, text: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(text, encoding="utf-8")
        except OSError as ex:
            raise TransferError(f"Failed to write {self._path}: {ex}") from ex

    def read_text(self) -> str:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeDecodeError) as ex:
            raise TransferError(f"Failed to read {self._path}: {ex}") from ex


class StreamChannel:
    """Standard streams as the channel: export goes to stdout, import reads stdin."""

    def __init__(self, *, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> None:
        self._stdin = stdin
        self._stdout = stdout

    def write_text(self, text: str) -> None:
        out = self._stdout or sys.stdout
        try:
            out.write(text)
            if not text.endswith("\n"):
                out.write("\n")
            out.flush()
        except (OSError, ValueError) as ex:
            raise TransferError(f"Failed to write to output stream: {ex}") from ex

    def read_text(self) -> str:
        inp = self._stdin or sys.stdin
        try:
            return inp.read()
        except (OSError, ValueError, UnicodeDecodeError) as ex:
            raise TransferError(f"Failed to read from input stream: {ex}") from ex


__all__ = ["FileChannel", "MemoryChannel", "StreamChannel", "TransferChannel"]

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from common.errors import InvalidArgument, LamisError, ValidationError
from common.render import (
    format_error,
    format_export_success,
    format_grid,
    format_import_prompt,
    format_import_success,
)
from common.transfer import FileChannel, MemoryChannel, StreamChannel, TransferChannel
from state.file_store import ENV_STATE_DIR, JsonFileStore
from state.gateway import PersistenceGateway
from state.models import STORAGE_KEY, RowFlags
from state.s3_store import S3GridStore

from tracker.session import TrackerSession


ENV_STATE_BUCKET = "LAMIS_STATE_BUCKET"
ENV_STATE_KEY = "LAMIS_STATE_KEY"  # optional; defaults to "lamis_data"
ENV_FERNET_KEY = "LAMIS_FERNET_KEY"
ENV_TRANSFER_FILE = "LAMIS_TRANSFER_FILE"
ENV_LOG_LEVEL = "LAMIS_LOG_LEVEL"
ENV_AUTOSAVE = "LAMIS_AUTOSAVE"


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.environ.get(name)
    return val if val not in (None, "") else default


def _require(v: Optional[str], what: str) -> str:
    if not v:
        raise RuntimeError(f"Missing required configuration: {what}")
    return v


def _truthy(v: Optional[str]) -> bool:
    return (v or "").strip().lower() in ("1", "true", "yes", "on")


def _log_level(raw: Optional[str]) -> int:
    # Unknown names fall back to WARNING
    return logging.getLevelNamesMapping().get((raw or "").strip().upper(), logging.WARNING)


def build_gateway() -> PersistenceGateway:
    """S3 when a bucket is configured, otherwise the local JSON file."""
    bucket = _getenv(ENV_STATE_BUCKET)
    if bucket:
        fernet_key = _require(_getenv(ENV_FERNET_KEY), ENV_FERNET_KEY)
        key = _getenv(ENV_STATE_KEY, STORAGE_KEY) or STORAGE_KEY
        return S3GridStore(bucket=bucket, key=key, fernet_key=fernet_key)
    return JsonFileStore(_getenv(ENV_STATE_DIR))


def build_channel(path: Optional[str], *, interactive: bool = False) -> TransferChannel:
    path = path or _getenv(ENV_TRANSFER_FILE)
    if path:
        return FileChannel(path)
    # The shell owns stdin, so its clipboard lives in memory
    return MemoryChannel() if interactive else StreamChannel()


def _confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def _format_row(row: int, flags: RowFlags) -> str:
    marks = " ".join(f"{c}={'x' if v else '-'}" for c, v in flags.to_dict().items())
    return f"row {row}: {marks}"


# -------- Commands --------
def _cmd_show(session: TrackerSession, args: argparse.Namespace) -> int:
    print(format_grid(session.grid, session.dirty))
    return 0


def _cmd_toggle(session: TrackerSession, args: argparse.Namespace) -> int:
    # A one-shot process has no later chance to save, so persist right away
    flags = session.toggle(args.row, args.column.upper())
    session.save(args.row)
    print(_format_row(args.row, flags))
    return 0


def _cmd_save_all(session: TrackerSession, args: argparse.Namespace) -> int:
    session.save_all()
    print("Saved.")
    return 0


def _cmd_export(session: TrackerSession, args: argparse.Namespace) -> int:
    envelope = session.export()
    # Keep stdout clean for the payload when exporting to the stream
    print(format_export_success(envelope.filename), file=sys.stderr)
    return 0


def _run_import(session: TrackerSession, *, assume_yes: bool) -> int:
    try:
        pending = session.request_import()
    except ValidationError as ex:
        print(format_error("Import Error", str(ex)), file=sys.stderr)
        return 1

    prompt = format_import_prompt(pending.filename)
    if not assume_yes:
        print(prompt, file=sys.stderr)
        if not _confirm("Import"):
            pending.cancel()
            print("Import cancelled.", file=sys.stderr)
            return 0

    result = pending.confirm()
    print(format_import_success(result.persisted, result.error), file=sys.stderr)
    return 0 if result.persisted else 1


def _cmd_import(session: TrackerSession, args: argparse.Namespace) -> int:
    if isinstance(args.channel, StreamChannel) and not args.yes:
        # stdin carries the payload, so the prompt can't be answered
        print(
            format_error("Import Error", "reading from stdin requires --yes to replace all current data"),
            file=sys.stderr,
        )
        return 1
    return _run_import(session, assume_yes=args.yes)


_SHELL_HELP = """Commands:
  show                 print the grid
  t ROW COLUMN         toggle one cell (e.g. t 5 L)
  save ROW             save; clears the row's unsaved marker
  save-all             save every row
  export               export to the clipboard
  import               import from the clipboard (asks to confirm)
  help                 this text
  quit                 leave the shell"""


def _shell_step(session: TrackerSession, line: str) -> bool:
    """Run one shell line; returns False when the shell should stop."""
    parts = line.split()
    if not parts:
        return True
    cmd, rest = parts[0].lower(), parts[1:]
    if cmd in ("quit", "exit", "q"):
        return False
    if cmd == "help":
        print(_SHELL_HELP)
    elif cmd == "show":
        print(format_grid(session.grid, session.dirty))
    elif cmd in ("t", "toggle") and len(rest) == 2:
        row = _parse_row(rest[0])
        flags = session.toggle(row, rest[1].upper())
        print(f"{_format_row(row, flags)}  (unsaved)")
    elif cmd == "save" and len(rest) == 1:
        session.save(_parse_row(rest[0]))
        print("Saved.")
    elif cmd == "save-all":
        session.save_all()
        print("Saved.")
    elif cmd == "export":
        envelope = session.export()
        print(format_export_success(envelope.filename))
    elif cmd == "import":
        _run_import(session, assume_yes=False)
    else:
        print(f"Unknown command: {line.strip()} (try 'help')")
    return True


def _parse_row(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise InvalidArgument(f"row must be an integer, got {raw!r}") from None


def _cmd_shell(session: TrackerSession, args: argparse.Namespace) -> int:
    print(_SHELL_HELP)
    while True:
        try:
            line = input("lamis> ")
        except EOFError:
            print()
            return 0
        try:
            if not _shell_step(session, line):
                return 0
        except LamisError as ex:
            print(format_error("Error", str(ex)))


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="lamis",
        description="Track a 60-row L/A/M/I/S checkbox grid with offline export/import.",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("show", help="Print the grid")
    p.set_defaults(func=_cmd_show)

    p = sub.add_parser("toggle", help="Toggle one cell and save")
    p.add_argument("row", type=int, help="Row number, 1..60")
    p.add_argument("column", help="Column: L, A, M, I or S")
    p.set_defaults(func=_cmd_toggle)

    p = sub.add_parser("save-all", help="Write the grid to storage")
    p.set_defaults(func=_cmd_save_all)

    p = sub.add_parser("export", help="Export the grid as a LAMIS JSON envelope")
    p.add_argument("--file", default=None, help=f"Transfer file (default: env {ENV_TRANSFER_FILE} or stdout)")
    p.set_defaults(func=_cmd_export)

    p = sub.add_parser("import", help="Replace the grid with a LAMIS JSON envelope")
    p.add_argument("--file", default=None, help=f"Transfer file (default: env {ENV_TRANSFER_FILE} or stdin)")
    p.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p.set_defaults(func=_cmd_import)

    p = sub.add_parser("shell", help="Interactive session with per-row save")
    p.add_argument("--file", default=None, help=f"Transfer file (default: env {ENV_TRANSFER_FILE} or in-memory)")
    p.set_defaults(func=_cmd_shell)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=_log_level(_getenv(ENV_LOG_LEVEL)),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        args.channel = build_channel(getattr(args, "file", None), interactive=args.command == "shell")
        gateway = build_gateway()
        with TrackerSession.open(gateway, args.channel, autosave=_truthy(_getenv(ENV_AUTOSAVE))) as session:
            return args.func(session, args)
    except RuntimeError as ex:
        # LamisError failures and missing configuration
        print(format_error("Error", str(ex)), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

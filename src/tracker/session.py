from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from common.codec import ExchangeEnvelope, decode, encode
from common.dirty import DirtyTracker, DirtyView, check_row
from common.errors import ImportStateError, PersistenceError, TransferChannelEmpty
from common.grid import GridStore
from common.transfer import TransferChannel
from state.gateway import PersistenceGateway
from state.models import GridState, RowFlags


logger = logging.getLogger(__name__)


class SyncPhase(str, Enum):
    IDLE = "idle"
    EXPORTING = "exporting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    APPLYING = "applying"


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a confirmed import.

    A confirmed import always replaces the grid in memory. `persisted` tells
    whether the durable save that follows succeeded; on failure `error`
    carries the reason and the replacement is not rolled back.
    """

    persisted: bool
    error: Optional[str] = None


class PendingImport:
    """A decoded envelope waiting for the user to confirm or cancel."""

    def __init__(self, session: "TrackerSession", envelope: ExchangeEnvelope) -> None:
        self._session = session
        self.envelope = envelope

    @property
    def filename(self) -> Optional[str]:
        return self.envelope.filename

    def confirm(self) -> ImportResult:
        return self._session.confirm_import()

    def cancel(self) -> None:
        self._session.cancel_import()


class TrackerSession:
    """
    Grid tracker engine: in-memory grid, dirty rows, persistence and the
    export/import protocol.

    Usage
    - `TrackerSession.open(gateway, channel)` loads the stored grid.
    - `toggle(row, column)` flips a cell and marks the row dirty.
    - `save(row)` writes the full grid but clears only that row's dirtiness;
      `save_all()` writes it and clears every row.
    - `export()` encodes the grid and writes it to the channel.
    - `request_import()` reads and validates the channel text, returning a
      PendingImport; nothing changes until `confirm()`.

    Failures raise LamisError subclasses and leave the in-memory grid usable.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        channel: TransferChannel,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        autosave: bool = False,
    ) -> None:
        self._gateway = gateway
        self._channel = channel
        self._clock = clock
        self._autosave = autosave
        self._dirty = DirtyTracker()
        self._grid = GridStore(dirty=self._dirty)
        self._phase = SyncPhase.IDLE
        self._pending: Optional[ExchangeEnvelope] = None

    # -------- Construction helpers --------
    @classmethod
    def open(cls, gateway: PersistenceGateway, channel: TransferChannel, **kwargs) -> "TrackerSession":
        session = cls(gateway, channel, **kwargs)
        session.hydrate()
        return session

    def hydrate(self) -> None:
        """Replace the in-memory grid with the stored record, if any."""
        stored = self._gateway.load()
        if stored is not None:
            self._grid.replace_all(stored)
        self._dirty.clear_all()
        logger.debug("Loaded grid with %d stored rows", len(self._grid))

    def __enter__(self) -> "TrackerSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if not self._autosave or self._dirty.count() == 0:
            return
        # Best-effort: nobody is left to report to
        try:
            self.save_all()
        except PersistenceError as ex:
            logger.warning("Autosave of %d dirty rows failed: %s", self._dirty.count(), ex)

    # -------- Read side --------
    @property
    def phase(self) -> SyncPhase:
        return self._phase

    @property
    def dirty(self) -> DirtyView:
        return self._dirty.view()

    @property
    def grid(self) -> GridStore:
        return self._grid

    @property
    def pending(self) -> Optional[PendingImport]:
        if self._pending is None:
            return None
        return PendingImport(self, self._pending)

    def flags(self, row: int) -> RowFlags:
        return self._grid.flags(row)

    def snapshot(self) -> GridState:
        return self._grid.snapshot()

    # -------- Mutations --------
    def toggle(self, row: int, column: str) -> RowFlags:
        return self._grid.toggle(row, column)

    def save(self, row: int) -> None:
        """Persist the full grid, then mark only `row` as clean."""
        check_row(row)
        self._gateway.save(self._grid.snapshot())
        self._dirty.clear(row)
        logger.debug("Saved grid for row %d; %d rows still dirty", row, self._dirty.count())

    def save_all(self) -> None:
        self._gateway.save(self._grid.snapshot())
        self._dirty.clear_all()
        logger.debug("Saved grid; all rows clean")

    # -------- Export / import --------
    def export(self) -> ExchangeEnvelope:
        """Encode the current grid and write it to the transfer channel."""
        previous = self._phase
        self._phase = SyncPhase.EXPORTING
        try:
            now = self._clock() if self._clock else None
            envelope = encode(self._grid.snapshot(), now)
            self._channel.write_text(envelope.to_text())
        finally:
            self._phase = previous
        logger.debug("Exported grid as %s", envelope.filename)
        return envelope

    def request_import(self) -> PendingImport:
        """Read and validate the channel text; the grid is untouched until confirmed.

        Raises TransferChannelEmpty, TransferError or a ValidationError subclass;
        any failure drops a previously pending import and returns to idle.
        """
        self._pending = None
        self._phase = SyncPhase.IDLE
        text = self._channel.read_text()
        if not text or not text.strip():
            raise TransferChannelEmpty()
        envelope = decode(text)
        self._pending = envelope
        self._phase = SyncPhase.AWAITING_CONFIRMATION
        return PendingImport(self, envelope)

    def confirm_import(self) -> ImportResult:
        if self._pending is None or self._phase is not SyncPhase.AWAITING_CONFIRMATION:
            raise ImportStateError("No import is awaiting confirmation")
        envelope = self._pending
        self._pending = None
        self._phase = SyncPhase.APPLYING
        try:
            self._grid.replace_all(envelope.data)
            self._dirty.clear_all()
            try:
                self._gateway.save(self._grid.snapshot())
            except PersistenceError as ex:
                logger.warning("Imported grid could not be saved: %s", ex)
                return ImportResult(persisted=False, error=str(ex))
        finally:
            self._phase = SyncPhase.IDLE
        logger.debug("Imported and saved %s", envelope.filename or "grid data")
        return ImportResult(persisted=True)

    def cancel_import(self) -> None:
        if self._pending is None:
            raise ImportStateError("No import is awaiting confirmation")
        self._pending = None
        self._phase = SyncPhase.IDLE


__all__ = ["ImportResult", "PendingImport", "SyncPhase", "TrackerSession"]

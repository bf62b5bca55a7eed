from __future__ import annotations


class LamisError(RuntimeError):
    """Base error for the grid tracker."""


class InvalidArgument(LamisError, ValueError):
    """Row or column outside the fixed grid universe."""


class PersistenceError(LamisError):
    """Durable load or save of the grid record failed."""


class TransferError(LamisError):
    """Reading from or writing to the transfer channel failed."""


class TransferChannelEmpty(TransferError):
    """The transfer channel holds no text to import."""

    def __init__(self, message: str = "No data found in clipboard. Please copy LAMIS data first.") -> None:
        super().__init__(message)


class ValidationError(LamisError, ValueError):
    """An import payload was rejected; nothing was changed."""

    reason = "invalid_payload"
    default_message = "Invalid LAMIS data."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class MalformedPayload(ValidationError):
    reason = "malformed_payload"
    default_message = "Invalid data format. Please copy valid LAMIS JSON data to clipboard."


class MissingDataField(ValidationError):
    reason = "missing_data_field"
    default_message = "Invalid LAMIS data format. Missing or invalid data field."


class WrongDataKind(ValidationError):
    reason = "wrong_data_kind"
    default_message = "This doesn't appear to be LAMIS data. Please check your clipboard."


class ImportStateError(LamisError):
    """Confirm or cancel was requested while no import is awaiting confirmation."""


__all__ = [
    "ImportStateError",
    "InvalidArgument",
    "LamisError",
    "MalformedPayload",
    "MissingDataField",
    "PersistenceError",
    "TransferChannelEmpty",
    "TransferError",
    "ValidationError",
    "WrongDataKind",
]

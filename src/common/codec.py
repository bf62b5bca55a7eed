from __future__ import annotations

import copy
import json
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from state.gateway import strict_loads
from state.models import ROW_COUNT, GridState

from .errors import MalformedPayload, MissingDataField, WrongDataKind


APP_VERSION = "1.0"
DATA_TYPE = "LAMIS_CHECKBOX_DATA"


class ExchangeEnvelope(BaseModel):
    """
    Portable snapshot of the grid moved through the transfer channel.

    Fields (JSON names in parentheses)
    - export_date (exportDate): ISO-8601 export timestamp.
    - app_version (appVersion): format tag, currently "1.0".
    - data_type (dataType): always "LAMIS_CHECKBOX_DATA" on export.
    - total_rows (totalRows): informational, always 60 on export.
    - filename: suggested file name derived from the export time.
    - data: the GridState payload.

    Notes
    - Envelopes decoded from foreign input may lack any metadata field;
      only `data` is guaranteed.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    export_date: Optional[str] = Field(default=None, alias="exportDate")
    app_version: Optional[str] = Field(default=None, alias="appVersion")
    data_type: Optional[str] = Field(default=None, alias="dataType")
    total_rows: Optional[int] = Field(default=None, alias="totalRows")
    filename: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)

    def to_text(self) -> str:
        # Pretty-printed, field order as declared
        return json.dumps(self.model_dump(by_alias=True), indent=2, ensure_ascii=False, allow_nan=False)


def build_filename(now: datetime) -> str:
    return f"LAMIS_Data_{now:%Y-%m-%d}_{now:%H-%M-%S}.json"


def encode(state: GridState, now: Optional[datetime] = None) -> ExchangeEnvelope:
    """Wrap a grid snapshot with export metadata derived from `now`.

    When `now` is omitted the local, timezone-aware current time is used.
    """
    if now is None:
        now = datetime.now().astimezone()
    return ExchangeEnvelope(
        export_date=now.isoformat(timespec="milliseconds"),
        app_version=APP_VERSION,
        data_type=DATA_TYPE,
        total_rows=ROW_COUNT,
        filename=build_filename(now),
        data=copy.deepcopy(state),
    )


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _opt_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def decode(raw_text: str) -> ExchangeEnvelope:
    """Parse and validate an exchange envelope.

    Checks, in order:
    1. the text parses as standard JSON (no NaN or Infinity), else MalformedPayload;
    2. a `data` field exists and is an object, else MissingDataField;
    3. a present `dataType` equals "LAMIS_CHECKBOX_DATA", else WrongDataKind.
       A missing or empty `dataType` is accepted.
    Row entries inside `data` are taken verbatim. Metadata fields of the
    wrong type are treated as absent.
    """
    try:
        parsed = strict_loads(raw_text)
    except (TypeError, ValueError) as ex:
        raise MalformedPayload() from ex

    if not isinstance(parsed, dict):
        raise MissingDataField()
    data = parsed.get("data")
    if not isinstance(data, dict):
        raise MissingDataField()

    data_type = parsed.get("dataType")
    if data_type and data_type != DATA_TYPE:
        raise WrongDataKind()

    return ExchangeEnvelope(
        export_date=_opt_str(parsed.get("exportDate")),
        app_version=_opt_str(parsed.get("appVersion")),
        data_type=_opt_str(data_type),
        total_rows=_opt_int(parsed.get("totalRows")),
        filename=_opt_str(parsed.get("filename")),
        data=data,
    )


__all__ = [
    "APP_VERSION",
    "DATA_TYPE",
    "ExchangeEnvelope",
    "build_filename",
    "decode",
    "encode",
]

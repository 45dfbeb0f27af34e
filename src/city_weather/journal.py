"""Opt-in JSONL audit trail of weather queries and the raw payloads behind them.

Nothing here is ever read back into a session.
"""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from .exceptions import JournalError
from .redaction import sanitize_for_logging
from .session.models import SessionPhase, SessionState

_UNSAFE_NAME_CHARS_RE = re.compile(r"[^A-Za-z0-9_-]")


def _encode(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return sanitize_for_logging(value.model_dump(mode="json"))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        moment = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
        return moment.astimezone(UTC).isoformat()
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JournalWriter:
    """Appends query events to a daily JSONL file and dumps raw payloads beside it."""

    def __init__(self, journal_dir: Path, raw_payload_dir: Path, session_id: str) -> None:
        self.journal_dir = journal_dir
        self.raw_payload_dir = raw_payload_dir
        self.session_id = session_id
        self._raw_sequence = 0
        try:
            journal_dir.mkdir(parents=True, exist_ok=True)
            raw_payload_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise JournalError(f"Failed creating journal directories: {exc}") from exc
        self.events_path = journal_dir / f"weather_{datetime.now(UTC):%Y%m%d}.jsonl"

    def write_event(
        self,
        event_type: str,
        payload: dict[str, Any],
        metadata: dict[str, Any] | None = None,
    ) -> None:
        record = {
            "ts": datetime.now(UTC).isoformat(),
            "event_type": event_type,
            "session_id": self.session_id,
            "payload": sanitize_for_logging(payload),
            "metadata": sanitize_for_logging(metadata or {}),
        }
        try:
            line = json.dumps(record, ensure_ascii=False, default=_encode)
            with self.events_path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except (OSError, TypeError, ValueError) as exc:
            raise JournalError(f"Failed writing event journal: {exc}") from exc

    def write_raw_snapshot(self, name: str, payload: Any) -> Path:
        """Dump ``payload`` as pretty JSON; files are numbered in write order per session."""
        self._raw_sequence += 1
        safe_name = _UNSAFE_NAME_CHARS_RE.sub("_", name)
        output_path = (
            self.raw_payload_dir / f"{self.session_id}_{self._raw_sequence:04d}_{safe_name}.json"
        )
        try:
            text = json.dumps(
                sanitize_for_logging(payload), ensure_ascii=False, indent=2, default=_encode
            )
            output_path.write_text(text + "\n", encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            raise JournalError(f"Failed writing raw payload snapshot: {exc}") from exc
        return output_path

    def record_query_start(self, city: str) -> None:
        self.write_event("weather_request_start", payload={"city": city})

    def record_query_outcome(self, city: str, state: SessionState) -> str:
        """Journal the state a query left behind and return the event type written.

        The current-conditions payload is dumped whenever a snapshot is on
        screen, including one kept from an earlier query after a failure.
        """
        payload: dict[str, Any] = {
            "city": city,
            "phase": state.phase,
            "forecast_entries": len(state.forecast_list),
            "forecast_revision": state.forecast_revision,
        }
        if state.snapshot is not None:
            payload["location_name"] = state.snapshot.location_name
            payload["current_raw_path"] = self.write_raw_snapshot(
                "owm_current", state.snapshot.raw
            )

        if state.phase is SessionPhase.FAILED:
            event_type = "weather_request_failure"
            payload["error"] = state.error
        else:
            event_type = "weather_request_success"
            payload["forecast_raw_path"] = self.write_raw_snapshot(
                "owm_forecast", [entry.raw for entry in state.forecast_list]
            )
        self.write_event(event_type, payload=payload)
        return event_type

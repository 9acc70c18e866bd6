"""
modules/observability/logger.py
---------------------------------
Structured planner events, one JSON object per line (.jsonl).

Event types:
  PERFORMANCE -- wall time of a planner component (ItineraryBuilder.build, ...)
  FEEDBACK    -- a LIKE / DISLIKE applied to the user's vector

Usage:
    perf = StructuredLogger()
    with perf.timed("sess_abc123", "ItineraryBuilder.build") as payload:
        itinerary = builder.build(pool, options)
        payload["steps"] = len(itinerary.steps)

    perf.read_events("sess_abc123")   # -> list of records, oldest first

Records land in  <config.LOGS_DIR>/<session_id>.jsonl  unless a logs_dir is
given. Each record opens, appends to and closes its file, so a logger holds
no file handles between calls.
"""

from __future__ import annotations

import json
import os
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from datecourse import config

PERFORMANCE = "PERFORMANCE"
FEEDBACK    = "FEEDBACK"


class StructuredLogger:
    """Thread-safe, append-only JSONL event sink."""

    def __init__(self, logs_dir: Path | str | None = None) -> None:
        self._logs_dir = Path(logs_dir) if logs_dir else Path(config.LOGS_DIR)
        self._lock = threading.Lock()

    # ── writing ───────────────────────────────────────────────────────────

    def log(self, session_id: str, event_type: str, payload: dict) -> None:
        record = {
            "timestamp":  datetime.now(timezone.utc).isoformat(),
            "session_id": session_id,
            "event_type": event_type,
            "payload":    payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"
        with self._lock:
            os.makedirs(self._logs_dir, exist_ok=True)
            with open(self._path(session_id), "a", encoding="utf-8") as fh:
                fh.write(line)

    @contextmanager
    def timed(self, session_id: str, component: str) -> Iterator[dict]:
        """
        Time the wrapped block and emit one PERFORMANCE record on exit.
        The yielded dict is merged into the payload, so callers can attach
        result sizes. Nothing is written if the block raises.
        """
        extra: dict = {}
        t0 = time.perf_counter()
        yield extra
        self.log(session_id, PERFORMANCE, {
            "component":   component,
            "duration_ms": round((time.perf_counter() - t0) * 1000, 2),
            **extra,
        })

    # ── reading ───────────────────────────────────────────────────────────

    def read_events(self, session_id: str, event_type: str | None = None) -> list[dict]:
        """All records of a session (optionally one event type), oldest first."""
        path = self._path(session_id)
        if not path.exists():
            return []
        records = []
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line:
                    continue
                rec = json.loads(line)
                if event_type is None or rec.get("event_type") == event_type:
                    records.append(rec)
        return records

    # ── internals ─────────────────────────────────────────────────────────

    def _path(self, session_id: str) -> Path:
        return self._logs_dir / f"{session_id}.jsonl"

"""
modules/observability/logger.py
-------------------------------
Engine telemetry as JSON lines, one file per request session:

    <config.LOGS_DIR>/<session_id>.jsonl

Record kinds
  PERFORMANCE  {component, duration_ms, ...}   one per generate() / optimize()
  DIAGNOSTIC   {note}                          mirrors EngineContext.note()

A request's file stays open while its diagnostics are written and is closed
by the PERFORMANCE record that ends the request. configure_logging() sets up
the stdlib loggers used by every other module.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import IO

import config

PERFORMANCE = "PERFORMANCE"
DIAGNOSTIC = "DIAGNOSTIC"


def configure_logging(level: str | None = None) -> None:
    """Stdlib logging setup for the CLI and the API process."""
    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


class StructuredLogger:
    """Thread-safe JSONL sink keyed by request session id."""

    def __init__(self, logs_dir: Path | str | None = None) -> None:
        self._logs_dir = Path(logs_dir) if logs_dir else None
        self._lock = threading.Lock()
        self._sessions: dict[str, IO[str]] = {}

    @property
    def logs_dir(self) -> Path:
        # read per call so tests can point LOGS_DIR elsewhere after import
        return self._logs_dir or config.LOGS_DIR

    # ── Engine records ───────────────────────────────────────────────────────

    def diagnostic(self, session_id: str, note: str) -> None:
        self.log(session_id, DIAGNOSTIC, {"note": note})

    def performance(self, session_id: str, component: str, started: float, **fields) -> None:
        """
        Write the closing PERFORMANCE record of a request.
        ``started`` is a time.perf_counter() reading taken when the call began.
        """
        payload = {
            "component": component,
            **fields,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        }
        self.log(session_id, PERFORMANCE, payload)
        self.close(session_id)

    # ── Raw access ───────────────────────────────────────────────────────────

    def log(self, session_id: str, event_type: str, payload: dict) -> None:
        line = json.dumps(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "session_id": session_id,
                "event_type": event_type,
                "payload": payload,
            },
            default=str,
            ensure_ascii=False,
        )
        with self._lock:
            fh = self._sessions.get(session_id) or self._open(session_id)
            fh.write(line + "\n")
            fh.flush()

    def close(self, session_id: str | None = None) -> None:
        """Close one session's file, or every open file when no id is given."""
        with self._lock:
            ids = [session_id] if session_id else list(self._sessions)
            for sid in ids:
                fh = self._sessions.pop(sid, None)
                if fh is not None:
                    fh.close()

    def _open(self, session_id: str) -> IO[str]:
        os.makedirs(self.logs_dir, exist_ok=True)
        fh = open(self.logs_dir / f"{session_id}.jsonl", "a", encoding="utf-8")  # noqa: SIM115
        self._sessions[session_id] = fh
        return fh

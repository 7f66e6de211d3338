"""SQLite key-value store for the persisted session snapshot."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from ats_optimizer.models.analysis import AnalysisResult
from ats_optimizer.models.resume import ResumeSection
from ats_optimizer.models.session import AppStep, SessionState

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".ats-optimizer" / "session.db"

_SECTIONS = TypeAdapter(list[ResumeSection])


class SessionStore:
    """Persists one session as four independent keys.

    Each key is decoded on its own; a missing or unreadable value falls
    back to its default instead of failing the whole load.
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS session_state (
                    key TEXT PRIMARY KEY,
                    value_json TEXT NOT NULL
                )
            """)

    def _read_raw(self) -> dict[str, str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT key, value_json FROM session_state").fetchall()
        return dict(rows)

    def load(self) -> SessionState:
        """Load the saved session, or defaults for whatever is unusable."""
        raw = self._read_raw()
        values: dict = {}

        decoders = {
            "step": lambda v: AppStep(json.loads(v)),
            "resume_text": lambda v: _as_str(json.loads(v)),
            "analysis": _decode_analysis,
            "sections": lambda v: _SECTIONS.validate_json(v),
        }
        for key, decode in decoders.items():
            if key not in raw:
                continue
            try:
                values[key] = decode(raw[key])
            except (ValueError, TypeError, ValidationError) as exc:
                logger.warning("Discarding unreadable session value %r: %s", key, exc)

        return SessionState(**values)

    def save(self, state: SessionState) -> None:
        """Persist every key of ``state``."""
        analysis = state.analysis.model_dump_json() if state.analysis is not None else "null"
        rows = [
            ("step", json.dumps(state.step.value)),
            ("resume_text", json.dumps(state.resume_text)),
            ("analysis", analysis),
            ("sections", _SECTIONS.dump_json(state.sections).decode("utf-8")),
        ]
        with self._connect() as conn:
            conn.executemany(
                "INSERT OR REPLACE INTO session_state (key, value_json) VALUES (?, ?)",
                rows,
            )

    def clear(self) -> int:
        """Remove every saved key. Returns count of deleted rows."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM session_state")
            return cursor.rowcount


def _as_str(value: object) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected string, got {type(value).__name__}")
    return value


def _decode_analysis(value: str) -> AnalysisResult | None:
    if json.loads(value) is None:
        return None
    return AnalysisResult.model_validate_json(value)

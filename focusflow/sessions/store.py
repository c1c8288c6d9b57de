"""
Session Log Store — append-only SQLite record of every work/break interval.

Rows are never updated or deleted. A resumed interval gets a new row with a
new id rather than an edit of the aborted one.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .models import SessionKind, SessionRecord, from_iso, to_iso


class SessionLogStore:
    """SQLite-backed session log; each append is its own transaction."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._init_db()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def append(self, record: SessionRecord) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO sessions
                    (session_id, started_at, ended_at, kind, completed, category)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    to_iso(record.started_at),
                    to_iso(record.ended_at),
                    record.kind.value,
                    1 if record.completed else 0,
                    record.category,
                ),
            )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def read_all(self) -> List[SessionRecord]:
        """Every record, in append order."""
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM sessions ORDER BY row_id ASC"
            ).fetchall()
        return [_to_record(row) for row in rows]

    def query(
        self,
        kind: Optional[SessionKind] = None,
        completed: Optional[bool] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: int = 500,
    ) -> List[SessionRecord]:
        """Filtered records, newest first."""
        clauses = []
        params: list = []

        if kind is not None:
            clauses.append("kind = ?")
            params.append(SessionKind(kind).value)
        if completed is not None:
            clauses.append("completed = ?")
            params.append(1 if completed else 0)
        if since is not None:
            clauses.append("started_at >= ?")
            params.append(to_iso(since))
        if until is not None:
            clauses.append("started_at <= ?")
            params.append(to_iso(until))

        where = ("WHERE " + " AND ".join(clauses)) if clauses else ""
        params.append(limit)

        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM sessions {where} "
                f"ORDER BY started_at DESC, row_id DESC LIMIT ?",
                params,
            ).fetchall()
        return [_to_record(row) for row in rows]

    def completed_work_by_date(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> Dict[str, int]:
        """
        Count completed work sessions per UTC calendar day ("YYYY-MM-DD"),
        keyed by the day the session ended. This is the read-only view the
        reward/achievement system builds streaks and point totals from.

        *since*/*until* bound the end timestamp, the same one the day key
        comes from.
        """
        clauses = ["kind = ?", "completed = 1"]
        params: list = [SessionKind.WORK.value]
        if since is not None:
            clauses.append("COALESCE(ended_at, started_at) >= ?")
            params.append(to_iso(since))
        if until is not None:
            clauses.append("COALESCE(ended_at, started_at) <= ?")
            params.append(to_iso(until))

        where = " AND ".join(clauses)
        with self._conn() as conn:
            rows = conn.execute(
                f"""
                SELECT substr(COALESCE(ended_at, started_at), 1, 10) AS day, COUNT(*)
                FROM sessions
                WHERE {where}
                GROUP BY day
                ORDER BY day ASC
                """,
                params,
            ).fetchall()
        return {day: count for day, count in rows}

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS sessions (
                    row_id      INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id  TEXT    NOT NULL,
                    started_at  TEXT    NOT NULL,
                    ended_at    TEXT,
                    kind        TEXT    NOT NULL,
                    completed   INTEGER NOT NULL DEFAULT 0,
                    category    TEXT
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_started ON sessions(started_at)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_ended ON sessions(ended_at)")

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_COLUMNS = "session_id, started_at, ended_at, kind, completed, category"


def _to_record(row: tuple) -> SessionRecord:
    session_id, started_at, ended_at, kind, completed, category = row
    return SessionRecord(
        id=session_id,
        started_at=from_iso(started_at),  # type: ignore[arg-type]
        ended_at=from_iso(ended_at),
        kind=SessionKind(kind),
        completed=bool(completed),
        category=category,
    )

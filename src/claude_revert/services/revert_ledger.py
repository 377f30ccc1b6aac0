"""SQLite ledger of reverted changes."""

import sqlite3
import threading
import time
from pathlib import Path

from claude_revert.types.changes import RevertLedgerEntry

DEFAULT_LEDGER_PATH = Path.home() / ".local" / "share" / "claude-revert" / "reverts.db"


class RevertLedger:
    """Persists which changes have been reverted. Rows are upserted, never deleted."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            db_path = DEFAULT_LEDGER_PATH
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db_path = str(db_path)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        # A commit must be on disk before a revert is reported as done
        self._conn.execute("PRAGMA synchronous=FULL")
        self._conn.row_factory = sqlite3.Row
        self._create_table()

    @property
    def db_path(self) -> str:
        return self._db_path

    def _create_table(self):
        with self._lock:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS reverted_changes (
                    change_id TEXT PRIMARY KEY,
                    file_path TEXT NOT NULL DEFAULT '',
                    reverted_at REAL NOT NULL
                )
            """)
            self._conn.commit()

    def load(self) -> dict[str, RevertLedgerEntry]:
        with self._lock:
            rows = self._conn.execute("SELECT * FROM reverted_changes").fetchall()
        return {row["change_id"]: self._row_to_entry(row) for row in rows}

    def get(self, change_id: str) -> RevertLedgerEntry | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM reverted_changes WHERE change_id = ?",
                (change_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_entry(row)

    def record(self, change_id: str, file_path: str = "") -> RevertLedgerEntry:
        """Upsert a reverted marker and commit it before returning."""
        entry = RevertLedgerEntry(change_id=change_id, reverted_at=time.time(), file_path=file_path)
        with self._lock:
            try:
                self._conn.execute("""
                    INSERT OR REPLACE INTO reverted_changes
                    (change_id, file_path, reverted_at)
                    VALUES (?, ?, ?)
                """, (entry.change_id, entry.file_path, entry.reverted_at))
                self._conn.commit()
            except sqlite3.Error:
                self._conn.rollback()
                raise
        return entry

    def close(self):
        with self._lock:
            self._conn.close()

    def _row_to_entry(self, row: sqlite3.Row) -> RevertLedgerEntry:
        return RevertLedgerEntry(
            change_id=row["change_id"],
            reverted_at=row["reverted_at"],
            file_path=row["file_path"],
        )

from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class OffsetStore:
    """Per-track user offsets (ms), keyed by a track key such as the audio path."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.db_path)
        con.row_factory = sqlite3.Row
        return con

    def _init_db(self) -> None:
        with self._connect() as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS track_offsets (
                    track_key TEXT PRIMARY KEY,
                    user_offset_ms INTEGER NOT NULL,
                    updated_at INTEGER NOT NULL
                );
                """
            )

    def get(self, track_key: str) -> int | None:
        """
        Returns the saved offset or None if the track has no entry.
        """
        with self._connect() as con:
            row = con.execute(
                "SELECT user_offset_ms FROM track_offsets WHERE track_key=?",
                (track_key,),
            ).fetchone()
            if row is None:
                return None
            return int(row["user_offset_ms"])

    def set(self, track_key: str, user_offset_ms: int) -> None:
        now = int(time.time())
        with self._connect() as con:
            con.execute(
                """
                INSERT INTO track_offsets(track_key, user_offset_ms, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(track_key) DO UPDATE SET
                    user_offset_ms=excluded.user_offset_ms,
                    updated_at=excluded.updated_at
                """,
                (track_key, int(user_offset_ms), now),
            )
        logger.debug("Saved offset %d ms for %s", user_offset_ms, track_key)

    def delete(self, track_key: str) -> None:
        with self._connect() as con:
            con.execute("DELETE FROM track_offsets WHERE track_key=?", (track_key,))

    def clear(self) -> None:
        with self._connect() as con:
            con.execute("DELETE FROM track_offsets")

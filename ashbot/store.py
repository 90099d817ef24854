"""Append-only SQLite log of every room message the bot accepted.

This is the only durable state. Brains are rebuilt from it on startup.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator


logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


@dataclass(frozen=True)
class PersistedMessage:
    room_local: str
    room_domain: str
    sender_nick: str
    body: str


class MessageLog:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        try:
            if str(self.path) != ":memory:":
                self.path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.path))
            with self._conn:
                self._conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS msg (
                        id      INTEGER PRIMARY KEY,
                        node    TEXT NOT NULL,
                        domain  TEXT NOT NULL,
                        nick    TEXT NOT NULL,
                        msg     TEXT NOT NULL
                    )
                    """
                )
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Cannot open message log {self.path}: {e}") from e
        logger.info("Message log: %s", self.path)

    def append(self, room_local: str, room_domain: str, sender_nick: str, body: str) -> None:
        try:
            # one transaction per row: either the whole record lands or nothing does
            with self._conn:
                self._conn.execute(
                    "INSERT INTO msg (node, domain, nick, msg) VALUES (?, ?, ?, ?)",
                    (room_local, room_domain, sender_nick, body),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Cannot append to message log: {e}") from e

    def scan_all(self) -> Iterator[PersistedMessage]:
        try:
            cur = self._conn.execute("SELECT node, domain, nick, msg FROM msg ORDER BY id")
            for node, domain, nick, msg in cur:
                yield PersistedMessage(room_local=node, room_domain=domain, sender_nick=nick, body=msg)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot read message log: {e}") from e

    def count(self) -> int:
        try:
            (n,) = self._conn.execute("SELECT COUNT(*) FROM msg").fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot read message log: {e}") from e
        return int(n)

    def close(self) -> None:
        self._conn.close()

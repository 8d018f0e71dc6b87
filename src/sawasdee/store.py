from __future__ import annotations

import sqlite3
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Optional, Protocol

from .config import Settings


class StoreError(Exception):
    """Raised when the underlying key-value backend fails to read or write."""


class PersistentStore(Protocol):
    """Key-value blob store used as the scheduler's only durability mechanism.

    キー単位で文字列（JSON）を丸ごと読み書きする。部分更新やトランザクションは持たない。
    """

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store; used in tests and when SRS_STORE_BACKEND=memory."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class SQLiteKeyValueStore:
    """SQLite-backed key-value store.

    - 1 キー = 1 行（value に JSON 文字列をそのまま保存）
    - set は INSERT OR REPLACE の単一文で上書きするため、呼び出し側から見て原子的
    - sqlite3 / OS のエラーは StoreError に包んで送出する
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        try:
            self._ensure_dirs()
            self._init_db()
        except (sqlite3.Error, OSError) as exc:
            raise StoreError(f"failed to initialize store at {db_path}") from exc

    # --- low-level helpers ---
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        with conn:  # autocommit on pragma
            conn.execute("pragma journal_mode=WAL;")
        return conn

    def _ensure_dirs(self) -> None:
        p = Path(self.db_path)
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                    """
                )
        finally:
            conn.close()

    # --- public API ---
    def get(self, key: str) -> Optional[str]:
        try:
            conn = self._connect()
            try:
                cur = conn.execute("SELECT value FROM kv_store WHERE key = ?;", (key,))
                row = cur.fetchone()
                return None if row is None else str(row["value"])
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreError(f"failed to read key {key!r}") from exc

    def set(self, key: str, value: str) -> None:
        now = datetime.now(UTC).isoformat()
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO kv_store(key, value, updated_at) VALUES (?, ?, ?);",
                        (key, value, now),
                    )
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreError(f"failed to write key {key!r}") from exc

    def delete(self, key: str) -> None:
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute("DELETE FROM kv_store WHERE key = ?;", (key,))
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreError(f"failed to delete key {key!r}") from exc


def build_store(cfg: Settings) -> PersistentStore:
    """Create the store selected by ``SRS_STORE_BACKEND``."""
    if cfg.srs_store_backend == "memory":
        return InMemoryKeyValueStore()
    return SQLiteKeyValueStore(db_path=cfg.srs_db_path)

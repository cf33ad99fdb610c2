# mediadup/database/manager.py
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import List, Optional

from ..config import (
    DEFAULT_CACHE_BUSY_TIMEOUT_MS, DEFAULT_CACHE_RETRY_BASE_DELAY, DEFAULT_CACHE_WRITE_RETRIES
)

logger = logging.getLogger(__name__)


def _is_busy(error: sqlite3.OperationalError) -> bool:
    msg = str(error).lower()
    return "locked" in msg or "busy" in msg


class CacheStore:
    """Persistent path -> hash cache keyed by (path, mtime, size).

    Every failure here is non-fatal: a failed lookup is a miss and a
    failed write only means the file is recomputed next scan. Each thread
    gets its own connection, so worker threads and worker processes can
    share one database file; SQLite serializes the writers.
    """

    def __init__(self, db_path: Path, busy_timeout_ms: int = DEFAULT_CACHE_BUSY_TIMEOUT_MS,
                 write_retries: int = DEFAULT_CACHE_WRITE_RETRIES,
                 retry_base_delay: float = DEFAULT_CACHE_RETRY_BASE_DELAY):
        self.db_path = Path(db_path)
        self.busy_timeout_ms = busy_timeout_ms
        self.write_retries = write_retries
        self.retry_base_delay = retry_base_delay
        self._local = threading.local()
        self._lock = threading.Lock()
        self._connections: List[sqlite3.Connection] = []

    def get_connection(self) -> sqlite3.Connection:
        conn = getattr(self._local, "conn", None)
        if conn is None:
            conn = sqlite3.connect(str(self.db_path), timeout=self.busy_timeout_ms / 1000.0,
                                   check_same_thread=False)
            conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout_ms)};")
            self._local.conn = conn
            with self._lock:
                self._connections.append(conn)
        return conn

    def close(self) -> None:
        with self._lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            try:
                conn.close()
            except sqlite3.Error as e:
                logger.debug("Closing cache connection failed: %s", e)
        self._local = threading.local()

    def get(self, path: str, mtime: int, size: int) -> Optional[str]:
        """Cached hash when the stored (mtime, size) match exactly, else None."""
        try:
            row = self.get_connection().execute(
                "SELECT hash FROM filehash WHERE path = ? AND mtime = ? AND size = ? LIMIT 1",
                (path, int(mtime), int(size)),
            ).fetchone()
        except sqlite3.Error as e:
            logger.warning("Cache lookup failed for %s: %s", path, e)
            return None
        return row[0] if row and row[0] else None

    def put(self, path: str, mtime: int, size: int, file_hash: str) -> bool:
        """Store or replace the row for ``path``. Returns False on failure."""
        for attempt in range(self.write_retries + 1):
            try:
                conn = self.get_connection()
                with conn:
                    conn.execute(
                        """
                        INSERT OR REPLACE INTO filehash (path, mtime, size, hash, updated_at)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        (path, int(mtime), int(size), file_hash, int(time.time())),
                    )
                return True
            except sqlite3.OperationalError as e:
                if _is_busy(e) and attempt < self.write_retries:
                    delay = self.retry_base_delay * (2 ** attempt)
                    logger.debug("Cache busy writing %s, retry %d in %.2fs", path, attempt + 1, delay)
                    time.sleep(delay)
                    continue
                logger.warning("Cache write failed for %s: %s", path, e)
                return False
            except sqlite3.Error as e:
                logger.warning("Cache write failed for %s: %s", path, e)
                return False
        return False

    def __enter__(self) -> "CacheStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __getstate__(self):
        # Connections never cross a process boundary
        return {
            "db_path": self.db_path,
            "busy_timeout_ms": self.busy_timeout_ms,
            "write_retries": self.write_retries,
            "retry_base_delay": self.retry_base_delay,
        }

    def __setstate__(self, state):
        self.__init__(**state)

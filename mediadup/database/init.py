import logging
import sqlite3
from pathlib import Path

from .schema import CACHE_SCHEMA

logger = logging.getLogger(__name__)


def init_db_if_needed(db_path: Path) -> bool:
    """Create the cache schema if absent. Safe to call on every scan.

    Returns False (and logs) when the database can not be initialized;
    the scan then runs without a cache.
    """
    db_path = Path(db_path)
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path))
    except (OSError, sqlite3.Error) as e:
        logger.warning("Hash cache unavailable at %s: %s", db_path, e)
        return False
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.executescript(CACHE_SCHEMA)
        conn.commit()
        return True
    except sqlite3.Error as e:
        logger.warning("Could not initialize hash cache %s: %s", db_path, e)
        return False
    finally:
        conn.close()

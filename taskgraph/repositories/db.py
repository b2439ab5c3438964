# Rev 0.2.0

"""SQLite connection, transactions and migrations (Rev 0.2.0)
- One autocommit connection per thread (isolation_level=None); writes that span several
  statements go through Database.transaction()
- WAL mode, foreign_keys=ON
- Applies taskgraph/migrations/*.sql in lexical order, recording name + sha256
  in schema_migrations; a changed hash on an applied file is logged, not re-run
"""
from __future__ import annotations
import hashlib
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List

from taskgraph.utils.logging_setup import get_logger
from taskgraph.utils.paths import DB_PATH, MIGRATIONS_DIR

_log = get_logger("DB")


def _sha256(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """BEGIN IMMEDIATE ... COMMIT on an autocommit connection; ROLLBACK and re-raise on error.

    IMMEDIATE takes the write lock up front, so a second writer on another
    connection waits out busy_timeout instead of failing mid-transaction.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    else:
        conn.execute("COMMIT")


class Database:
    """
    One sqlite3 connection per thread, all on the same file (WAL lets readers
    and one writer proceed together). ``conn`` resolves to the calling
    thread's connection, opened on first use; ``close()`` closes them all.
    """

    def __init__(self, path: Path | str = DB_PATH) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._local = threading.local()
        self._lock = threading.Lock()
        self._open: List[sqlite3.Connection] = []
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                filename   TEXT PRIMARY KEY,
                sha256     TEXT NOT NULL,
                applied_at TEXT NOT NULL
            )
            """
        )
        _log.info("SQLite open %s", self.path)

    def _connect(self) -> sqlite3.Connection:
        # check_same_thread=False only so close() can run from the owning thread
        conn = sqlite3.connect(self.path, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA foreign_keys=ON;")
        conn.execute("PRAGMA busy_timeout=5000;")
        return conn

    @property
    def conn(self) -> sqlite3.Connection:
        conn = getattr(self._local, "conn", None)
        if conn is None:
            conn = self._connect()
            self._local.conn = conn
            with self._lock:
                self._open.append(conn)
            _log.debug("SQLite connection opened on %s", threading.current_thread().name)
        return conn

    def close(self) -> None:
        with self._lock:
            conns, self._open = self._open, []
        for conn in conns:
            conn.close()
        self._local = threading.local()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with transaction(self.conn) as conn:
            yield conn

    def applied(self) -> Dict[str, str]:
        """filename -> recorded sha256"""
        rows = self.conn.execute("SELECT filename, sha256 FROM schema_migrations").fetchall()
        return {r[0]: r[1] for r in rows}

    def run_migrations(self, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
        applied = self.applied()
        done: list[str] = []
        for p in sorted(migrations_dir.glob("*.sql")):
            sql = p.read_text(encoding="utf-8")
            digest = _sha256(sql)
            if p.name in applied:
                if applied[p.name] != digest:
                    _log.warning("Migration %s changed after it was applied (recorded %s, now %s)",
                                 p.name, applied[p.name][:12], digest[:12])
                continue
            self.conn.executescript(sql)
            self.conn.execute(
                "INSERT INTO schema_migrations(filename, sha256, applied_at) VALUES(?, ?, ?)",
                (p.name, digest, datetime.now(timezone.utc).isoformat(timespec="seconds")),
            )
            _log.info("Applied migration %s", p.name)
            done.append(p.name)
        return done

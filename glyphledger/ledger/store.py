"""Hot and cold receipt stores behind the narrow compaction interface.

HotStore: row-oriented transactional store (SQLite).
    row_count() -> int, reclaim() -> None
ColdStore: append-only archive (JSONL).
    estimate_live_bytes() -> int | None, compact_all() -> None

Both expose exclusive(), an advisory lock held for a whole compaction of
that store. Every backend failure surfaces as StoreError.
"""
import fcntl
import json
import logging
import os
import sqlite3
import time
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Iterator

from glyphledger.core.errors import StoreError

logger = logging.getLogger("glyphledger.ledger")

_SQL_SCHEMA = """
CREATE TABLE IF NOT EXISTS receipts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    receipt_id TEXT NOT NULL,
    tenant_id TEXT NOT NULL,
    receipt_type TEXT NOT NULL,
    timestamp INTEGER NOT NULL,
    content_hash TEXT NOT NULL,
    body TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_receipts_timestamp ON receipts(timestamp);
CREATE INDEX IF NOT EXISTS idx_receipts_tenant ON receipts(tenant_id);
"""


@contextmanager
def file_lock(path: Path, store: str, blocking: bool = False) -> Iterator[None]:
    """Exclusive lock on <path>.lock.

    Non-blocking by default; blocking=True waits for the holder instead.

    Raises:
        StoreError: If another holder has the lock and blocking is False
    """
    lock_path = Path(f"{path}.lock")
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        f = open(lock_path, "a")
    except OSError as e:
        raise StoreError(store, f"cannot open lock file {lock_path}: {e}") from e
    with f:
        try:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX if blocking else fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            raise StoreError(store, f"store is locked by another run: {lock_path}") from None
        try:
            yield
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)


class HotStore:
    """Row-oriented store. Subclasses implement row_count and reclaim."""

    name = "hot"

    def row_count(self) -> int:
        raise NotImplementedError

    def reclaim(self) -> None:
        raise NotImplementedError

    def exclusive(self):
        return nullcontext()


class ColdStore:
    """Append-only archive. Subclasses implement the live-byte estimate and compact_all."""

    name = "cold"

    def estimate_live_bytes(self) -> int | None:
        raise NotImplementedError

    def compact_all(self) -> None:
        raise NotImplementedError

    def exclusive(self):
        return nullcontext()


class SqliteHotStore(HotStore):
    """SQLite hot ledger. WAL journal with synchronous=NORMAL.

    reclaim() prunes rows older than retention_seconds (when set), then
    truncates the WAL and vacuums. It is idempotent.
    """

    name = "sqlite"

    def __init__(self, path: str | Path, retention_seconds: int | None = None, clock=time.time):
        self.path = Path(path)
        self.retention_seconds = retention_seconds
        self._clock = clock
        self._db: sqlite3.Connection | None = None

    @property
    def _conn(self) -> sqlite3.Connection:
        """Open lazily so open failures surface inside the run that needs the store."""
        if self._db is None:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                db = sqlite3.connect(str(self.path), timeout=30.0, isolation_level=None)
                db.execute("PRAGMA journal_mode=WAL;")
                db.execute("PRAGMA synchronous=NORMAL;")
                db.executescript(_SQL_SCHEMA)
            except (sqlite3.Error, OSError) as e:
                raise StoreError(self.name, f"failed to open sqlite ledger at {self.path}: {e}") from e
            self._db = db
        return self._db

    def append(self, receipt: dict) -> int:
        """Insert one stamped receipt; returns its row id."""
        try:
            with self._conn:
                cur = self._conn.execute(
                    "INSERT INTO receipts (receipt_id, tenant_id, receipt_type, timestamp, content_hash, body)"
                    " VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        receipt["receipt_id"],
                        receipt["tenant_id"],
                        receipt["receipt_type"],
                        int(receipt["timestamp"]),
                        receipt["content_hash"],
                        json.dumps(receipt, sort_keys=True),
                    ),
                )
            return int(cur.lastrowid)
        except sqlite3.Error as e:
            raise StoreError(self.name, f"append failed: {e}") from e

    def row_count(self) -> int:
        try:
            (count,) = self._conn.execute("SELECT COUNT(*) FROM receipts").fetchone()
        except sqlite3.Error as e:
            raise StoreError(self.name, f"row count failed: {e}") from e
        return int(count)

    def reclaim(self) -> None:
        try:
            if self.retention_seconds is not None:
                cutoff = int(self._clock()) - self.retention_seconds
                with self._conn:
                    cur = self._conn.execute("DELETE FROM receipts WHERE timestamp < ?", (cutoff,))
                logger.info("pruned %d hot rows older than %d", cur.rowcount, cutoff)
            self._conn.execute("PRAGMA wal_checkpoint(TRUNCATE);")
            self._conn.execute("VACUUM;")
        except sqlite3.Error as e:
            raise StoreError(self.name, f"reclaim failed: {e}") from e

    def exclusive(self):
        return file_lock(self.path, self.name)

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None


class JsonlColdStore(ColdStore):
    """Append-only JSONL archive.

    The live-byte estimate is the archive size; None when the archive does
    not exist. compact_all() rewrites the archive keeping the first record
    per receipt_id and dropping unparsable lines.
    """

    name = "archive"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def append(self, receipt: dict) -> str:
        """Append a receipt; returns its receipt_id.

        Blocks while compaction holds the store lock.
        """
        line = json.dumps(receipt, sort_keys=True) + "\n"
        try:
            with file_lock(self.path, self.name, blocking=True):
                with open(self.path, "a") as f:
                    f.write(line)
                    f.flush()
        except OSError as e:
            raise StoreError(self.name, f"append failed: {e}") from e
        return receipt.get("receipt_id", "")

    def read_all(self) -> list[dict]:
        """Every parsable record in archive order."""
        receipts = []
        if not self.path.exists():
            return receipts
        try:
            with open(self.path, "r") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        receipts.append(json.loads(line))
                    except json.JSONDecodeError:
                        logger.warning("skipping unparsable archive line in %s", self.path)
        except OSError as e:
            raise StoreError(self.name, f"read failed: {e}") from e
        return receipts

    def estimate_live_bytes(self) -> int | None:
        try:
            return self.path.stat().st_size
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(self.name, f"stat failed: {e}") from e

    def compact_all(self) -> None:
        if not self.path.exists():
            return

        seen = set()
        kept = []
        for receipt in self.read_all():
            key = receipt.get("receipt_id") if isinstance(receipt, dict) else None
            if key is not None:
                if key in seen:
                    continue
                seen.add(key)
            kept.append(json.dumps(receipt, sort_keys=True) + "\n")

        tmp = self.path.with_name(self.path.name + ".compact")
        try:
            with open(tmp, "w") as f:
                f.writelines(kept)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            raise StoreError(self.name, f"compact failed: {e}") from e

    def exclusive(self):
        return file_lock(self.path, self.name)

"""SQLite database engine with WAL mode for concurrent reads."""

from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from panel_monitor.db.migrations import run_migrations

logger = logging.getLogger(__name__)

_db: aiosqlite.Connection | None = None


async def _check_integrity(db: aiosqlite.Connection) -> bool:
    """Run PRAGMA integrity_check and return True if the database is healthy."""
    try:
        async with db.execute("PRAGMA integrity_check") as cursor:
            rows = await cursor.fetchall()
        if len(rows) == 1 and str(rows[0][0]).lower() == "ok":
            return True
        problems = [str(r[0]) for r in rows[:10]]
        logger.error("Database integrity check failed: %s", "; ".join(problems))
        return False
    except aiosqlite.Error:
        logger.error("Database integrity check raised an exception", exc_info=True)
        return False


def _quarantine(db_path: Path) -> Path:
    """Move a corrupt database (and its WAL/SHM files) aside."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    backup = db_path.with_suffix(f".corrupt-{stamp}.db")
    for suffix in ("", "-wal", "-shm"):
        src = db_path.parent / (db_path.name + suffix)
        if src.exists():
            shutil.move(str(src), str(db_path.parent / (backup.name + suffix)))
    return backup


async def init_db(db_path: str | Path) -> aiosqlite.Connection:
    """Open the database with WAL mode and run migrations.

    A database that fails its integrity check is moved aside and a fresh one
    is created; readings are re-ingested by the upstream collector.
    """
    global _db
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    if db_path.exists():
        try:
            test_db = await aiosqlite.connect(str(db_path))
            healthy = await _check_integrity(test_db)
            await test_db.close()
        except aiosqlite.Error:
            healthy = False
        if not healthy:
            backup = _quarantine(db_path)
            logger.warning("Corrupt database moved to %s; starting fresh", backup)

    db = await aiosqlite.connect(str(db_path))
    await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA synchronous=NORMAL")
    await db.execute("PRAGMA busy_timeout=5000")
    db.row_factory = aiosqlite.Row

    await run_migrations(db)
    _db = db
    logger.info("Database initialised at %s (WAL mode)", db_path)
    return db


async def close_db() -> None:
    """Close the database connection."""
    global _db
    if _db is not None:
        try:
            await _db.execute("PRAGMA wal_checkpoint(TRUNCATE)")
        except aiosqlite.Error:
            logger.warning("WAL checkpoint on close failed", exc_info=True)
        await _db.close()
        _db = None
        logger.info("Database connection closed")

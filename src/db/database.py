# manages connection to the local sqlite backend, helpers internal to db package
import asyncio
import os
from contextlib import asynccontextmanager
from pathlib import Path
from sqlite3 import Row

import aiosqlite

from utils.logger import get_logger

_logger = get_logger(__name__)

DB_PATH = "data/db.sqlite"
_SQL_DIR = Path(__file__).parent
DB_INIT_SCRIPTS = [
    _SQL_DIR / "schema.sql",
    _SQL_DIR / "seed.sql",
]

_initialized = False
_init_lock = asyncio.Lock()


async def _init_db(conn: aiosqlite.Connection) -> None:
    for script in DB_INIT_SCRIPTS:
        if not script.exists() or script.stat().st_size == 0:
            continue
        _logger.info(f"Initializing database with script {script.name}...")
        await conn.executescript(script.read_text(encoding="utf-8"))
    await conn.commit()


async def _table_exists(conn: aiosqlite.Connection, table_name: str) -> bool:
    cur = await conn.execute(
        """
        SELECT name
        FROM sqlite_master
        WHERE type = 'table'
          AND name = ?;
        """,
        (table_name,),
    )
    row = await cur.fetchone()
    await cur.close()
    return row is not None


@asynccontextmanager
async def connect() -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection.

    Creates the tables and demo rows the first time an empty database is used.
    """
    global _initialized
    db_dir = os.path.dirname(DB_PATH)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    conn = await aiosqlite.connect(DB_PATH)
    conn.row_factory = Row

    try:
        if not _initialized:
            async with _init_lock:
                if not _initialized:
                    if not await _table_exists(conn, "users"):
                        _logger.info("Initializing database...")
                        await _init_db(conn)
                    _initialized = True
        yield conn
    finally:
        await conn.close()


def configure(path: str) -> None:
    """Point the local backend at another database file."""
    global DB_PATH, _initialized
    DB_PATH = path
    _initialized = False

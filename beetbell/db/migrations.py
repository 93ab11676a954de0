"""Creates the kv table on startup."""

import logging
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


async def run_migrations(db_path: Path) -> None:
    """Apply ``schema.sql`` to the database at ``db_path``.

    Every statement is ``IF NOT EXISTS``; existing settings and ledger rows
    are left alone, so this runs on every startup.
    """
    schema_sql = SCHEMA_PATH.read_text()

    async with aiosqlite.connect(db_path) as db:
        await db.executescript(schema_sql)
        await db.commit()

    logger.info(f"kv store ready at {db_path}")

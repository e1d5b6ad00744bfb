import aiosqlite

from name_hunter.infra.config import DB_PATH, ensure_data_dir

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_settings (
    key             TEXT PRIMARY KEY,
    value           TEXT,
    updated_at      TEXT DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS dictionary (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    workspace_id    TEXT NOT NULL,
    original        TEXT NOT NULL,
    translated      TEXT NOT NULL,
    type            TEXT DEFAULT 'term',
    created_at      TEXT DEFAULT (datetime('now')),
    UNIQUE(workspace_id, original)
);

CREATE INDEX IF NOT EXISTS idx_dictionary_workspace ON dictionary(workspace_id, created_at);
"""


async def get_connection() -> aiosqlite.Connection:
    conn = await aiosqlite.connect(str(DB_PATH))
    await conn.execute("PRAGMA journal_mode=WAL")
    conn.row_factory = aiosqlite.Row
    return conn


async def init_db() -> None:
    ensure_data_dir()
    conn = await get_connection()
    try:
        await conn.executescript(_SCHEMA_SQL)
        await conn.commit()
    finally:
        await conn.close()

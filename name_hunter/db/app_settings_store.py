"""Key/value access to the app_settings table."""

from name_hunter.db.sqlite_db import get_connection


async def get_setting(key: str) -> str | None:
    """Return the stored value for key, or None if absent."""
    conn = await get_connection()
    try:
        cursor = await conn.execute(
            "SELECT value FROM app_settings WHERE key = ?",
            (key,),
        )
        row = await cursor.fetchone()
        return row["value"] if row else None
    finally:
        await conn.close()


async def set_setting(key: str, value: str) -> None:
    conn = await get_connection()
    try:
        await conn.execute(
            """INSERT INTO app_settings (key, value, updated_at)
               VALUES (?, ?, datetime('now'))
               ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at""",
            (key, value),
        )
        await conn.commit()
    finally:
        await conn.close()

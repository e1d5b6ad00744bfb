"""Read-only queries against the translator's workspace dictionary."""

from name_hunter.db.sqlite_db import get_connection


async def get_known_terms(workspace_id: str) -> set[str]:
    """Lowercased original and translated forms already in a workspace's dictionary."""
    conn = await get_connection()
    try:
        cursor = await conn.execute(
            "SELECT original, translated FROM dictionary WHERE workspace_id = ?",
            (workspace_id,),
        )
        rows = await cursor.fetchall()
    finally:
        await conn.close()

    known: set[str] = set()
    for row in rows:
        for value in (row["original"], row["translated"]):
            if value and value.strip():
                known.add(value.strip().lower())
    return known

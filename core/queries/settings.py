"""Settings (key/value) queries using SQLAlchemy Core."""

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import settings


async def get_settings_by_keys(
    conn: AsyncConnection,
    keys: list[str],
) -> dict[str, str]:
    """
    Fetch several settings in one query.

    Keys with no row are simply absent from the returned dict.
    """
    result = await conn.execute(
        select(settings.c.key, settings.c.value).where(settings.c.key.in_(keys))
    )
    return {row["key"]: row["value"] for row in result.mappings()}


async def upsert_setting(conn: AsyncConnection, key: str, value: str) -> None:
    """Create or overwrite a setting. Caller's transaction commits it."""
    stmt = pg_insert(settings).values(key=key, value=value)
    stmt = stmt.on_conflict_do_update(
        index_elements=[settings.c.key],
        set_={"value": stmt.excluded.value},
    )
    await conn.execute(stmt)

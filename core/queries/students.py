"""Student queries used by the expiry notification job."""

from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import students


async def get_students_expiring_by(
    conn: AsyncConnection,
    target_date: date,
) -> list[dict[str, Any]]:
    """
    Get every student whose membership ends on or before target_date.

    Already-expired memberships match too. No pagination: the whole
    result set is loaded at once.
    """
    result = await conn.execute(
        select(
            students.c.id,
            students.c.name,
            students.c.email,
            students.c.phone,
            students.c.membership_end,
        )
        .where(students.c.membership_end <= target_date)
        .order_by(students.c.membership_end, students.c.id)
    )
    return [dict(row) for row in result.mappings()]

"""
API Dependencies — per-request DB session and pagination helpers.
"""

import math
from typing import AsyncGenerator

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from claimdesk.database import async_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session per request, commit on success, rollback on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def page_count(total: int, size: int) -> int:
    return math.ceil(total / size) if total else 0


def apply_changes(row, changes: dict) -> None:
    """Copy a partial update onto ``row``, refusing nulls for NOT NULL columns."""
    table = type(row).__table__
    cleared = sorted(
        name for name, value in changes.items()
        if value is None and not table.c[name].nullable
    )
    if cleared:
        raise HTTPException(status_code=422, detail=f"{', '.join(cleared)} cannot be null")
    for name, value in changes.items():
        setattr(row, name, value)

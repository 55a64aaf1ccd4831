# core/session.py
"""
Statement and commit wrappers shared by the service modules.

Driver errors roll the session back and surface as PersistenceError with
the driver message unchanged.
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import PersistenceError


async def execute(db: AsyncSession, stmt):
    try:
        return await db.execute(stmt)
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(str(exc)) from exc


async def commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(str(exc)) from exc


async def execute_and_commit(db: AsyncSession, stmt):
    """Run a write statement and commit it; returns the result for rowcount."""
    result = await execute(db, stmt)
    await commit(db)
    return result

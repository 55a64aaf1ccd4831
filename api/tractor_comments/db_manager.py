# api/tractor_comments/db_manager.py
"""
Append-only comments attached to a tractor. Independent of the audit trail.
"""
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from core import session as store
from core.errors import NotFoundError, ValidationError
from db_models.tractor_comment import TractorComment
from . import queries


class CommentNotFoundError(NotFoundError):
    pass


async def list_comments(db: AsyncSession, tractor_id: str) -> list[TractorComment]:
    result = await store.execute(db, queries.select_comments_for_tractor(tractor_id))
    return list(result.scalars().all())


async def add_comment(db: AsyncSession, tractor_id: str, text: str | None, author: str | None) -> TractorComment:
    """
    Append a comment stamped with the server time.

    Raises:
        ValidationError: If tractor_id, text or author is missing or blank
    """
    text = (text or "").strip()
    author = (author or "").strip()
    if not tractor_id:
        raise ValidationError("Tractor ID is required")
    if not text:
        raise ValidationError("Comment text is required")
    if not author:
        raise ValidationError("Author is required")

    comment = TractorComment(
        tractor_id=tractor_id,
        text=text,
        author=author,
        created_at=datetime.now(timezone.utc),
    )
    db.add(comment)
    await store.commit(db)
    await db.refresh(comment)
    return comment


async def delete_comment(db: AsyncSession, comment_id: str) -> None:
    """Raises CommentNotFoundError when no row was deleted."""
    result = await store.execute_and_commit(db, queries.delete_comment_by_id(comment_id))
    if not result.rowcount:
        raise CommentNotFoundError("Comment not found or already deleted")

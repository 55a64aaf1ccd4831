# api/tractor_comments/queries.py
"""
SQLAlchemy query builders for tractor comments.
"""
from sqlalchemy import select, delete

from db_models.tractor_comment import TractorComment


def select_comments_for_tractor(tractor_id: str):
    """Comments for one tractor, newest first."""
    return (
        select(TractorComment)
        .where(TractorComment.tractor_id == tractor_id)
        .order_by(TractorComment.created_at.desc())
    )


def delete_comment_by_id(comment_id: str):
    return delete(TractorComment).where(TractorComment.id == comment_id)

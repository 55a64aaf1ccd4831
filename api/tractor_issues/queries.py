# api/tractor_issues/queries.py
"""
SQLAlchemy query builders for tractor maintenance issues.
"""
from datetime import datetime

from sqlalchemy import select, update, delete

from db_models.tractor_issue import TractorIssue


def select_issues_for_tractor(tractor_id: str):
    """Issues for one tractor, newest first."""
    return (
        select(TractorIssue)
        .where(TractorIssue.tractor_id == tractor_id)
        .order_by(TractorIssue.time_created.desc())
    )


def complete_issue_by_id(issue_id: str, completed_at: datetime):
    return (
        update(TractorIssue)
        .where(TractorIssue.id == issue_id)
        .values(time_completed=completed_at)
    )


def delete_issue_by_id(issue_id: str):
    return delete(TractorIssue).where(TractorIssue.id == issue_id)

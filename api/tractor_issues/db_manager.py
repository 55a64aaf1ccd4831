# api/tractor_issues/db_manager.py
"""
Maintenance issues attached to a tractor.

An issue is open while time_completed is NULL. Completion is one-way: there
is no reopen, and completing again just moves the timestamp.
"""
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from core import session as store
from core.errors import NotFoundError, ValidationError
from db_models.tractor_issue import TractorIssue, IssueSeverity
from . import queries

SEVERITIES = tuple(s.value for s in IssueSeverity)
DEFAULT_SEVERITY = IssueSeverity.MEDIUM.value


class IssueNotFoundError(NotFoundError):
    pass


def coerce_severity(severity) -> str:
    """Anything other than Low / Medium / High becomes Medium."""
    return severity if severity in SEVERITIES else DEFAULT_SEVERITY


async def list_issues(db: AsyncSession, tractor_id: str) -> list[TractorIssue]:
    result = await store.execute(db, queries.select_issues_for_tractor(tractor_id))
    return list(result.scalars().all())


async def add_issue(
    db: AsyncSession,
    tractor_id: str,
    description: str | None,
    severity: str | None = None,
) -> TractorIssue:
    """
    Open a new issue.

    Raises:
        ValidationError: If tractor_id or description is missing or blank
    """
    description = (description or "").strip()
    if not tractor_id:
        raise ValidationError("Tractor ID is required")
    if not description:
        raise ValidationError("Issue description is required")

    issue = TractorIssue(
        tractor_id=tractor_id,
        description=description,
        severity=coerce_severity(severity),
        time_created=datetime.now(timezone.utc),
    )
    db.add(issue)
    await store.commit(db)
    await db.refresh(issue)
    return issue


async def complete_issue(db: AsyncSession, issue_id: str) -> None:
    """Set time_completed to now. Raises IssueNotFoundError if no row matched."""
    result = await store.execute_and_commit(
        db, queries.complete_issue_by_id(issue_id, datetime.now(timezone.utc))
    )
    if not result.rowcount:
        raise IssueNotFoundError("Issue not found or already deleted")


async def delete_issue(db: AsyncSession, issue_id: str) -> None:
    """Raises IssueNotFoundError when zero rows were deleted."""
    result = await store.execute_and_commit(db, queries.delete_issue_by_id(issue_id))
    if not result.rowcount:
        raise IssueNotFoundError("Issue not found or already deleted")

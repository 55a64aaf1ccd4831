# api/tractors/queries.py
"""
SQLAlchemy query builders for tractor and tractor-history operations.
"""
from datetime import datetime

from sqlalchemy import select, delete, func, or_

from db_models.tractor import Tractor, TractorStatus
from db_models.tractor_history import TractorHistory
from db_models.tractor_comment import TractorComment
from db_models.tractor_issue import TractorIssue


def select_tractor_by_id(tractor_id: str):
    """Select a tractor by its ID."""
    return select(Tractor).where(Tractor.id == tractor_id)


def select_all_tractors():
    """Select all tractors ordered by truck number."""
    return select(Tractor).order_by(Tractor.truck_number.asc())


def select_tractors_by_status(status: str):
    return (
        select(Tractor)
        .where(Tractor.status == status)
        .order_by(Tractor.truck_number.asc())
    )


def select_active_tractors():
    return select_tractors_by_status(TractorStatus.ACTIVE.value)


def select_tractors_by_operator(operator_id: str):
    return (
        select(Tractor)
        .where(Tractor.assigned_operator == operator_id)
        .order_by(Tractor.truck_number.asc())
    )


def search_tractors_by_truck_number(text: str):
    """Case-insensitive partial match on truck_number."""
    pattern = f"%{text.lower()}%"
    return (
        select(Tractor)
        .where(func.lower(Tractor.truck_number).like(pattern))
        .order_by(Tractor.truck_number.asc())
    )


def select_tractors_needing_service(threshold: datetime):
    """Tractors never serviced, or last serviced before ``threshold``."""
    return (
        select(Tractor)
        .where(
            or_(
                Tractor.last_service_date.is_(None),
                Tractor.last_service_date < threshold,
            )
        )
        .order_by(Tractor.truck_number.asc())
    )


def delete_tractor_by_id(tractor_id: str):
    return delete(Tractor).where(Tractor.id == tractor_id)


# --- History ---

def select_history_for_tractor(tractor_id: str, limit: int | None = None):
    """History rows for one tractor, newest first."""
    stmt = (
        select(TractorHistory)
        .where(TractorHistory.tractor_id == tractor_id)
        .order_by(TractorHistory.changed_at.desc())
    )
    if limit:
        stmt = stmt.limit(limit)
    return stmt


def select_latest_history_date(tractor_id: str):
    return (
        select(TractorHistory.changed_at)
        .where(TractorHistory.tractor_id == tractor_id)
        .order_by(TractorHistory.changed_at.desc())
        .limit(1)
    )


def select_all_history_dates():
    """(tractor_id, changed_at) for every history row, newest first."""
    return (
        select(TractorHistory.tractor_id, TractorHistory.changed_at)
        .order_by(TractorHistory.changed_at.desc())
    )


def select_cleanliness_history(since: datetime, tractor_id: str | None, limit: int):
    """cleanliness_rating changes since ``since``, oldest first."""
    stmt = select(TractorHistory).where(
        TractorHistory.field_name == "cleanliness_rating",
        TractorHistory.changed_at >= since,
    )
    if tractor_id:
        stmt = stmt.where(TractorHistory.tractor_id == tractor_id)
    return stmt.order_by(TractorHistory.changed_at.asc()).limit(limit)


def delete_history_for_tractor(tractor_id: str):
    return delete(TractorHistory).where(TractorHistory.tractor_id == tractor_id)


# --- Aggregates ---

def select_open_issue_tractor_ids():
    """One row per open issue (time_completed IS NULL)."""
    return select(TractorIssue.tractor_id).where(TractorIssue.time_completed.is_(None))


def select_comment_tractor_ids():
    """One row per comment."""
    return select(TractorComment.tractor_id)

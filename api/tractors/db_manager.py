# api/tractors/db_manager.py
"""
Business logic for the tractor lifecycle: create, update (with status /
operator reconciliation and a field-level audit trail), delete, and the
list views.
"""
import calendar
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.errors import NotFoundError, ValidationError
from core import session as store
from db_models.tractor import Tractor, TractorStatus
from db_models.tractor_history import TractorHistory
from . import queries
from .audit import TRACKED_FIELDS, FieldChange, diff_records, write_history
from .lifecycle import resolve_status_and_operator

logger = logging.getLogger(__name__)

# Columns a caller may set through create/update. Everything else
# (id, timestamps, updated_by) is stamped by the store.
WRITABLE_FIELDS = (
    "truck_number",
    "assigned_plant",
    "assigned_operator",
    "status",
    "last_service_date",
    "cleanliness_rating",
    "has_blower",
    "vin",
    "make",
    "model",
    "year",
    "freight",
)


class TractorNotFoundError(NotFoundError):
    """Raised when a tractor id doesn't exist."""
    pass


async def get_tractor_by_id(db: AsyncSession, tractor_id: str) -> Tractor | None:
    result = await store.execute(db, queries.select_tractor_by_id(tractor_id))
    return result.scalar_one_or_none()


async def get_tractor_or_raise(db: AsyncSession, tractor_id: str) -> Tractor:
    """Get a tractor by ID. Raises TractorNotFoundError if not found."""
    tractor = await get_tractor_by_id(db, tractor_id)
    if tractor is None:
        raise TractorNotFoundError("Tractor not found")
    return tractor


async def create_tractor(db: AsyncSession, data: dict, user_id: str) -> Tractor:
    """
    Insert a new tractor. Status defaults to Active.

    No history is written: there is no previous state to diff against.
    """
    if not user_id:
        raise ValidationError("User ID is required")

    now = datetime.now(timezone.utc)
    values = {field: data.get(field) for field in WRITABLE_FIELDS}
    values["status"] = values["status"] or TractorStatus.ACTIVE.value
    values["assigned_operator"] = values["assigned_operator"] or None
    if values["cleanliness_rating"] is None:
        values["cleanliness_rating"] = 0

    tractor = Tractor(
        **values,
        created_at=now,
        updated_at=now,
        updated_by=user_id,
    )
    db.add(tractor)
    await store.commit(db)
    await db.refresh(tractor)

    logger.info("Created tractor %s (%s)", tractor.id, tractor.truck_number)
    return tractor


def build_candidate(current: dict, patch: dict) -> dict:
    """
    Merge a patch into a snapshot and reconcile status / operator.

    Fields absent from the patch, or sent as null, keep their current value.
    assigned_operator is the exception: an explicit null clears it.
    """
    candidate = dict(current)
    for field in WRITABLE_FIELDS:
        if field in ("status", "assigned_operator"):
            continue
        value = patch.get(field)
        if value is not None:
            candidate[field] = value

    requested = {}
    if patch.get("status") is not None:
        requested["status"] = patch["status"]
    if "assigned_operator" in patch:
        requested["assigned_operator"] = patch["assigned_operator"]

    status, operator = resolve_status_and_operator(current, requested)
    candidate["status"] = status
    candidate["assigned_operator"] = operator
    return candidate


async def apply_update(
    db: AsyncSession,
    current: dict,
    patch: dict,
    user_id: str,
) -> tuple[Tractor, list[FieldChange]]:
    """
    Resolve, diff, persist and audit one update against the snapshot
    ``current``.

    There is no lock between reading ``current`` and writing: two updates
    computed from the same snapshot both succeed, the later write wins, and
    both leave history rows.

    Raises:
        TractorNotFoundError: If the tractor vanished since the snapshot
        PersistenceError: If the tractor write fails
        PartialAuditFailure: If the tractor was written but history was not
    """
    candidate = build_candidate(current, patch)
    changes = diff_records(current, candidate)

    tractor = await get_tractor_or_raise(db, current["id"])
    for field in WRITABLE_FIELDS:
        setattr(tractor, field, candidate[field])
    tractor.updated_at = datetime.now(timezone.utc)
    tractor.updated_by = user_id
    await store.commit(db)
    await db.refresh(tractor)

    await write_history(db, tractor.id, changes, user_id)

    logger.info(
        "Updated tractor %s: %d field(s) changed%s",
        tractor.id,
        len(changes),
        f" ({', '.join(c.field for c in changes)})" if changes else "",
    )
    return tractor, changes


async def update_tractor(
    db: AsyncSession,
    tractor_id: str,
    patch: dict,
    user_id: str,
) -> Tractor:
    """
    Load the current tractor and apply ``patch`` to it.

    Raises:
        ValidationError: If tractor_id or user_id is missing
        TractorNotFoundError: If the tractor doesn't exist
    """
    if not tractor_id:
        raise ValidationError("Tractor ID is required")
    if not user_id:
        raise ValidationError("User ID is required")

    tractor = await get_tractor_or_raise(db, tractor_id)
    tractor, _ = await apply_update(db, tractor.to_dict(), patch, user_id)
    return tractor


async def delete_tractor(db: AsyncSession, tractor_id: str) -> None:
    """
    Delete a tractor's history rows, then the tractor row.

    Each step commits on its own. If the second fails the history is already
    gone and nothing is restored.
    """
    if not tractor_id:
        raise ValidationError("Tractor ID is required")

    await store.execute_and_commit(db, queries.delete_history_for_tractor(tractor_id))
    await store.execute_and_commit(db, queries.delete_tractor_by_id(tractor_id))

    logger.info("Deleted tractor %s and its history", tractor_id)


async def verify_tractor(db: AsyncSession, tractor_id: str, user_id: str) -> Tractor:
    """Stamp updated_last / updated_by. Status and operator are untouched."""
    tractor = await get_tractor_or_raise(db, tractor_id)
    tractor.updated_last = datetime.now(timezone.utc)
    tractor.updated_by = user_id
    await store.commit(db)
    await db.refresh(tractor)
    return tractor


# --- Reads ---

async def _list(db: AsyncSession, stmt) -> list:
    result = await store.execute(db, stmt)
    return list(result.scalars().all())


async def list_tractors(db: AsyncSession) -> list[Tractor]:
    return await _list(db, queries.select_all_tractors())


async def list_active_tractors(db: AsyncSession) -> list[Tractor]:
    return await _list(db, queries.select_active_tractors())


async def list_tractors_by_status(db: AsyncSession, status: str) -> list[Tractor]:
    return await _list(db, queries.select_tractors_by_status(status))


async def list_tractors_by_operator(db: AsyncSession, operator_id: str) -> list[Tractor]:
    return await _list(db, queries.select_tractors_by_operator(operator_id))


async def search_tractors(db: AsyncSession, text: str) -> list[Tractor]:
    return await _list(db, queries.search_tractors_by_truck_number(text))


async def list_tractors_needing_service(db: AsyncSession, day_threshold: int | None = None) -> list[Tractor]:
    if day_threshold is None:
        day_threshold = settings.SERVICE_INTERVAL_DAYS
    threshold = datetime.now(timezone.utc) - timedelta(days=day_threshold)
    return await _list(db, queries.select_tractors_needing_service(threshold))


async def get_tractor_with_latest_history(db: AsyncSession, tractor_id: str) -> tuple[Tractor | None, datetime | None]:
    """Return the tractor (or None) and the time of its newest history row."""
    tractor = await get_tractor_by_id(db, tractor_id)
    if tractor is None:
        return None, None
    result = await store.execute(db, queries.select_latest_history_date(tractor_id))
    return tractor, result.scalar_one_or_none()


async def _secondary_rows(db: AsyncSession, stmt, label: str) -> list:
    # Aggregate inputs degrade to nothing rather than failing the list view
    try:
        result = await db.execute(stmt)
        return list(result.all())
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("Could not load %s for tractor list: %s", label, exc)
        return []


async def list_tractors_with_aggregates(db: AsyncSession) -> list[dict]:
    """
    Every tractor with its latest history date, open issue count and comment
    count.

    Four flat queries joined in memory by tractor id, so the cost is linear
    in rows rather than one round trip per tractor. The reads are not one
    snapshot; small skew between them is acceptable.
    """
    # Column snapshots, so a rollback in a failed secondary read cannot
    # expire the rows already loaded
    tractors = [tractor.to_dict() for tractor in await list_tractors(db)]

    latest: dict[str, datetime] = {}
    for tractor_id, changed_at in await _secondary_rows(db, queries.select_all_history_dates(), "history"):
        # rows arrive newest first, so the first one seen wins
        latest.setdefault(tractor_id, changed_at)

    open_issues = Counter(
        row.tractor_id
        for row in await _secondary_rows(db, queries.select_open_issue_tractor_ids(), "open issues")
    )
    comments = Counter(
        row.tractor_id
        for row in await _secondary_rows(db, queries.select_comment_tractor_ids(), "comments")
    )

    return [
        {
            "tractor": tractor,
            "latest_history_date": latest.get(tractor["id"]),
            "open_issues_count": open_issues.get(tractor["id"], 0),
            "comments_count": comments.get(tractor["id"], 0),
        }
        for tractor in tractors
    ]


# --- History ---

async def list_history(db: AsyncSession, tractor_id: str, limit: int | None = None) -> list[TractorHistory]:
    if limit is not None and limit <= 0:
        limit = None
    return await _list(db, queries.select_history_for_tractor(tractor_id, limit))


def _months_ago(now: datetime, months: int) -> datetime:
    month_index = now.month - 1 - months
    year = now.year + month_index // 12
    month = month_index % 12 + 1
    # clamp the day, e.g. 31 March minus one month -> end of February
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


async def list_cleanliness_history(
    db: AsyncSession,
    tractor_id: str | None = None,
    months: int | None = None,
) -> list[TractorHistory]:
    """cleanliness_rating changes in the last ``months`` months, oldest first."""
    if months is None:
        months = settings.CLEANLINESS_HISTORY_MONTHS
    since = _months_ago(datetime.now(timezone.utc), months)
    stmt = queries.select_cleanliness_history(since, tractor_id, settings.CLEANLINESS_HISTORY_LIMIT)
    return await _list(db, stmt)


async def add_history_entry(
    db: AsyncSession,
    tractor_id: str,
    field_name: str,
    old_value: str | None,
    new_value: str | None,
    changed_by: str,
) -> TractorHistory:
    """Manual / out-of-band audit row. field_name must be a tracked column."""
    if not tractor_id:
        raise ValidationError("Tractor ID is required")
    if field_name not in TRACKED_FIELDS:
        raise ValidationError(f"Field '{field_name}' is not tracked in history")

    entry = TractorHistory(
        tractor_id=tractor_id,
        field_name=field_name,
        old_value=old_value,
        new_value=new_value,
        changed_at=datetime.now(timezone.utc),
        changed_by=changed_by,
    )
    db.add(entry)
    await store.commit(db)
    await db.refresh(entry)
    return entry

# api/tractors/audit.py
"""
Field-level audit trail for tractor updates.

normalize_value() turns a column value into a comparable string,
diff_records() lists the tracked fields whose normalized value changed, and
write_history() appends one TractorHistory row per change.
"""
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import PartialAuditFailure
from db_models.tractor_history import TractorHistory

logger = logging.getLogger(__name__)

STRING = "string"
DATE = "date"
NUMBER = "number"
BOOLEAN = "boolean"

# Audit-tracked columns and how their values compare. Nothing outside this
# mapping is ever written to tractors_history by an update.
TRACKED_FIELDS: dict[str, str] = {
    "truck_number": STRING,
    "assigned_plant": STRING,
    "assigned_operator": STRING,
    "last_service_date": DATE,
    "cleanliness_rating": NUMBER,
    "has_blower": BOOLEAN,
    "vin": STRING,
    "make": STRING,
    "model": STRING,
    "year": NUMBER,
    "status": STRING,
    "freight": STRING,
}


@dataclass(frozen=True)
class FieldChange:
    field: str
    old: str | None
    new: str | None


def _normalize_date(value) -> str:
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _normalize_number(value) -> str:
    # Mirrors String(Number(v)): 5, "5" and 5.0 all become "5"
    if isinstance(value, bool):
        number = float(value)
    elif isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if text == "":
            number = 0.0
        else:
            try:
                number = float(text)
            except ValueError:
                return "NaN"
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer():
        return str(int(number))
    return repr(number)


def _normalize_boolean(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip().lower()


def normalize_value(value, kind: str = STRING) -> str | None:
    """Canonical string form of ``value`` for its declared kind; None stays None."""
    if value is None:
        return None
    if kind == DATE:
        return _normalize_date(value)
    if kind == NUMBER:
        return _normalize_number(value)
    if kind == BOOLEAN:
        return _normalize_boolean(value)
    return str(value)


def _differs(old: str | None, new: str | None, kind: str) -> bool:
    if kind == STRING:
        # NULL and "" are the same empty value for text columns
        return (old or "") != (new or "")
    return old != new


def diff_records(current: dict, candidate: dict) -> list[FieldChange]:
    """
    Tracked fields whose normalized value differs between two snapshots,
    in TRACKED_FIELDS order. At most one change per field.
    """
    changes = []
    for field, kind in TRACKED_FIELDS.items():
        old = normalize_value(current.get(field), kind)
        new = normalize_value(candidate.get(field), kind)
        if _differs(old, new, kind):
            changes.append(FieldChange(field=field, old=old, new=new))
    return changes


def failed_field_hint(changes: list[FieldChange]) -> str | None:
    """``field:newValue`` when exactly one change was attempted."""
    if len(changes) != 1:
        return None
    change = changes[0]
    return f"{change.field}:{change.new}"


async def write_history(
    db: AsyncSession,
    tractor_id: str,
    changes: list[FieldChange],
    changed_by: str,
    changed_at: datetime | None = None,
) -> list[TractorHistory]:
    """
    Insert one history row per change in a single commit.

    No-op for an empty list. The tractor row has already been committed by the
    caller; if this insert fails it stays written and PartialAuditFailure is
    raised instead.
    """
    if not changes:
        return []

    changed_at = changed_at or datetime.now(timezone.utc)
    rows = [
        TractorHistory(
            tractor_id=tractor_id,
            field_name=change.field,
            old_value=change.old,
            new_value=change.new,
            changed_at=changed_at,
            changed_by=changed_by,
        )
        for change in changes
    ]

    try:
        db.add_all(rows)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        hint = failed_field_hint(changes)
        logger.error(
            "Tractor %s was updated but %d history row(s) failed to insert (field=%s): %s",
            tractor_id, len(rows), hint, exc,
        )
        raise PartialAuditFailure(str(exc), failed_field=hint) from exc

    return rows

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from api.tractors.audit import (
    BOOLEAN,
    DATE,
    NUMBER,
    STRING,
    FieldChange,
    diff_records,
    failed_field_hint,
    normalize_value,
    write_history,
)
from core.errors import PartialAuditFailure


def snapshot(**overrides):
    base = {
        "id": "t-1",
        "truck_number": "T-100",
        "assigned_plant": "P01",
        "assigned_operator": "E1",
        "status": "Active",
        "last_service_date": datetime(2024, 1, 5, tzinfo=timezone.utc),
        "cleanliness_rating": 5,
        "has_blower": True,
        "vin": None,
        "make": "Mack",
        "model": "Granite",
        "year": 2019,
        "freight": None,
        "updated_at": datetime(2024, 2, 1, tzinfo=timezone.utc),
    }
    base.update(overrides)
    return base


@pytest.mark.parametrize(
    "value, kind, expected",
    [
        (None, STRING, None),
        (None, NUMBER, None),
        ("abc", STRING, "abc"),
        (5, NUMBER, "5"),
        ("5", NUMBER, "5"),
        (5.0, NUMBER, "5"),
        (4.5, NUMBER, "4.5"),
        ("", NUMBER, "0"),
        ("abc", NUMBER, "NaN"),
        (float("inf"), NUMBER, "Infinity"),
        (True, BOOLEAN, "true"),
        (False, BOOLEAN, "false"),
        (datetime(2024, 1, 5), DATE, "2024-01-05T00:00:00+00:00"),
        (datetime(2024, 1, 5, 2, tzinfo=timezone(timedelta(hours=2))), DATE, "2024-01-05T00:00:00+00:00"),
        ("2024-01-05T00:00:00Z", DATE, "2024-01-05T00:00:00+00:00"),
        (date(2024, 1, 5), DATE, "2024-01-05"),
    ],
)
def test_normalize_value(value, kind, expected):
    assert normalize_value(value, kind) == expected


@pytest.mark.parametrize(
    "value, kind",
    [
        ("Mack", STRING),
        (7, NUMBER),
        ("07", NUMBER),
        (2.25, NUMBER),
        (True, BOOLEAN),
        (datetime(2024, 3, 1, 12, 30), DATE),
        ("2024-03-01T12:30:00+05:00", DATE),
    ],
)
def test_normalize_value_is_idempotent(value, kind):
    once = normalize_value(value, kind)
    assert normalize_value(once, kind) == once


def test_diff_lists_only_changed_tracked_fields():
    current = snapshot()
    candidate = snapshot(make="Volvo", year=2021, updated_at=datetime.now(timezone.utc))

    changes = diff_records(current, candidate)

    assert changes == [
        FieldChange(field="make", old="Mack", new="Volvo"),
        FieldChange(field="year", old="2019", new="2021"),
    ]


def test_diff_ignores_representation_differences():
    current = snapshot()
    candidate = snapshot(
        cleanliness_rating="5",
        last_service_date=datetime(2024, 1, 5),
        vin="",
    )

    assert diff_records(current, candidate) == []


def test_diff_identical_records_is_empty():
    assert diff_records(snapshot(), snapshot()) == []


def test_diff_operator_cleared_and_status_changed():
    current = snapshot()
    candidate = snapshot(status="Spare", assigned_operator=None)

    changes = diff_records(current, candidate)

    assert [(c.field, c.old, c.new) for c in changes] == [
        ("assigned_operator", "E1", None),
        ("status", "Active", "Spare"),
    ]


def test_failed_field_hint():
    one = [FieldChange(field="status", old="Active", new="Spare")]
    two = one + [FieldChange(field="make", old="Mack", new="Volvo")]

    assert failed_field_hint(one) == "status:Spare"
    assert failed_field_hint(two) is None
    assert failed_field_hint([]) is None


class FailingSession:
    """Stands in for AsyncSession when the history insert must fail."""

    def __init__(self):
        self.added = []
        self.rolled_back = False

    def add_all(self, rows):
        self.added.extend(rows)

    async def commit(self):
        raise SQLAlchemyError("insert into tractors_history failed")

    async def rollback(self):
        self.rolled_back = True


@pytest.mark.anyio
async def test_write_history_empty_changes_touches_nothing():
    session = FailingSession()

    rows = await write_history(session, "t-1", [], "u-1")

    assert rows == []
    assert session.added == []


@pytest.mark.anyio
async def test_write_history_failure_raises_partial_audit_failure():
    session = FailingSession()
    changes = [FieldChange(field="status", old="Active", new="Spare")]

    with pytest.raises(PartialAuditFailure) as excinfo:
        await write_history(session, "t-1", changes, "u-1")

    assert excinfo.value.failed_field == "status:Spare"
    assert "tractors_history" in str(excinfo.value)
    assert session.rolled_back


@pytest.mark.anyio
async def test_write_history_failure_with_several_changes_has_no_hint():
    changes = [
        FieldChange(field="assigned_operator", old="E1", new=None),
        FieldChange(field="status", old="Active", new="Spare"),
    ]

    with pytest.raises(PartialAuditFailure) as excinfo:
        await write_history(FailingSession(), "t-1", changes, "u-1")

    assert excinfo.value.failed_field is None

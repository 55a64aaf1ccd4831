from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, text

from api.tractors import db_manager, queries
from api.tractor_comments import db_manager as comments_manager
from api.tractor_comments import queries as comment_queries
from api.tractor_issues import db_manager as issues_manager
from api.tractor_issues import queries as issue_queries
from core.errors import PersistenceError, ValidationError
from db_models.tractor import Tractor
from db_models.tractor_history import TractorHistory

USER = "22222222-2222-2222-2222-222222222222"


async def make_tractor(db, **fields):
    data = {"truck_number": "T-100", "assigned_plant": "P01", **fields}
    return await db_manager.create_tractor(db, data, USER)


async def history_rows(db, tractor_id):
    result = await db.execute(select(TractorHistory).where(TractorHistory.tractor_id == tractor_id))
    return list(result.scalars().all())


@pytest.mark.anyio
async def test_create_defaults_to_active_without_history(db_session):
    tractor = await make_tractor(db_session, assigned_operator="E1")

    assert tractor.status == "Active"
    assert tractor.cleanliness_rating == 0
    assert tractor.updated_by == USER
    assert await history_rows(db_session, tractor.id) == []


@pytest.mark.anyio
async def test_create_requires_user(db_session):
    with pytest.raises(ValidationError, match="User ID is required"):
        await db_manager.create_tractor(db_session, {"truck_number": "T-1"}, "")


@pytest.mark.anyio
async def test_clearing_operator_writes_two_history_rows(db_session):
    tractor = await make_tractor(db_session, status="Active", assigned_operator="E1")

    updated = await db_manager.update_tractor(db_session, tractor.id, {"assigned_operator": None}, USER)

    assert updated.status == "Spare"
    assert updated.assigned_operator is None
    rows = {row.field_name: row for row in await history_rows(db_session, tractor.id)}
    assert set(rows) == {"assigned_operator", "status"}
    assert (rows["assigned_operator"].old_value, rows["assigned_operator"].new_value) == ("E1", None)
    assert (rows["status"].old_value, rows["status"].new_value) == ("Active", "Spare")
    assert all(row.changed_by == USER for row in rows.values())


@pytest.mark.anyio
async def test_in_shop_request_with_operator_is_a_no_op(db_session):
    tractor = await make_tractor(db_session, status="Active", assigned_operator="E2")

    updated = await db_manager.update_tractor(db_session, tractor.id, {"status": "In Shop"}, USER)

    assert updated.status == "Active"
    assert updated.assigned_operator == "E2"
    assert await history_rows(db_session, tractor.id) == []


@pytest.mark.anyio
async def test_same_values_in_other_forms_write_no_history(db_session):
    tractor = await make_tractor(db_session, cleanliness_rating=5, year=2019)

    await db_manager.update_tractor(
        db_session, tractor.id, {"cleanliness_rating": 5, "year": 2019, "truck_number": "T-100"}, USER
    )

    assert await history_rows(db_session, tractor.id) == []


@pytest.mark.anyio
async def test_update_missing_tractor_raises_not_found(db_session):
    with pytest.raises(db_manager.TractorNotFoundError, match="Tractor not found"):
        await db_manager.update_tractor(db_session, "does-not-exist", {"make": "Volvo"}, USER)


@pytest.mark.anyio
async def test_update_requires_ids(db_session):
    with pytest.raises(ValidationError, match="Tractor ID is required"):
        await db_manager.update_tractor(db_session, "", {"make": "Volvo"}, USER)
    with pytest.raises(ValidationError, match="User ID is required"):
        await db_manager.update_tractor(db_session, "some-id", {"make": "Volvo"}, None)


@pytest.mark.anyio
async def test_delete_removes_history_before_tractor(db_session, monkeypatch):
    tractor = await make_tractor(db_session, assigned_operator="E1")
    await db_manager.update_tractor(db_session, tractor.id, {"make": "Mack"}, USER)
    await db_manager.update_tractor(db_session, tractor.id, {"year": 2020}, USER)
    await db_manager.update_tractor(db_session, tractor.id, {"assigned_operator": None}, USER)
    assert len(await history_rows(db_session, tractor.id)) == 4

    calls = []
    delete_history = queries.delete_history_for_tractor
    delete_tractor = queries.delete_tractor_by_id

    def spy_history(tractor_id):
        calls.append("history")
        return delete_history(tractor_id)

    def spy_tractor(tractor_id):
        calls.append("tractor")
        return delete_tractor(tractor_id)

    monkeypatch.setattr(queries, "delete_history_for_tractor", spy_history)
    monkeypatch.setattr(queries, "delete_tractor_by_id", spy_tractor)

    await db_manager.delete_tractor(db_session, tractor.id)

    assert calls == ["history", "tractor"]
    assert await history_rows(db_session, tractor.id) == []
    result = await db_session.execute(select(Tractor).where(Tractor.id == tractor.id))
    assert result.scalar_one_or_none() is None


@pytest.mark.anyio
async def test_updates_from_same_snapshot_both_leave_history(db_session):
    tractor = await make_tractor(db_session, make="Mack")
    current = tractor.to_dict()

    await db_manager.apply_update(db_session, current, {"make": "Volvo"}, USER)
    final, changes = await db_manager.apply_update(db_session, current, {"make": "Kenworth"}, "other-user")

    assert final.make == "Kenworth"
    assert [(c.old, c.new) for c in changes] == [("Mack", "Kenworth")]
    rows = await history_rows(db_session, tractor.id)
    assert sorted(row.new_value for row in rows) == ["Kenworth", "Volvo"]
    assert {row.old_value for row in rows} == {"Mack"}


@pytest.mark.anyio
async def test_aggregates_count_open_issues_and_comments(db_session):
    first = await make_tractor(db_session, truck_number="T-001")
    second = await make_tractor(db_session, truck_number="T-002")

    await db_manager.update_tractor(db_session, first.id, {"make": "Volvo"}, USER)
    await comments_manager.add_comment(db_session, first.id, "Dent on door", "Sam")
    await comments_manager.add_comment(db_session, first.id, "Fixed", "Sam")
    await issues_manager.add_issue(db_session, first.id, "Brake noise", "High")
    done = await issues_manager.add_issue(db_session, first.id, "Wipers", "Low")
    await issues_manager.complete_issue(db_session, done.id)

    rows = await db_manager.list_tractors_with_aggregates(db_session)
    by_number = {row["tractor"]["truck_number"]: row for row in rows}

    latest = (await db_manager.list_history(db_session, first.id))[0].changed_at
    assert by_number["T-001"]["latest_history_date"] == latest
    assert by_number["T-001"]["open_issues_count"] == 1
    assert by_number["T-001"]["comments_count"] == 2
    assert by_number["T-002"]["tractor"]["id"] == second.id
    assert by_number["T-002"]["latest_history_date"] is None
    assert by_number["T-002"]["open_issues_count"] == 0
    assert by_number["T-002"]["comments_count"] == 0


@pytest.mark.anyio
async def test_aggregates_degrade_when_a_secondary_read_fails(db_session, monkeypatch):
    tractor = await make_tractor(db_session)
    await comments_manager.add_comment(db_session, tractor.id, "Looks fine", "Sam")
    await issues_manager.add_issue(db_session, tractor.id, "Oil leak")

    monkeypatch.setattr(
        queries,
        "select_comment_tractor_ids",
        lambda: text("SELECT tractor_id FROM missing_comments_table"),
    )

    rows = await db_manager.list_tractors_with_aggregates(db_session)

    assert len(rows) == 1
    assert rows[0]["tractor"]["id"] == tractor.id
    assert rows[0]["open_issues_count"] == 1
    assert rows[0]["comments_count"] == 0


@pytest.mark.anyio
async def test_list_filters(db_session):
    old_service = datetime.now(timezone.utc) - timedelta(days=90)
    recent_service = datetime.now(timezone.utc) - timedelta(days=2)
    await make_tractor(db_session, truck_number="AB-1", assigned_operator="E1", last_service_date=recent_service)
    await make_tractor(db_session, truck_number="ab-2", status="Spare", last_service_date=old_service)
    await make_tractor(db_session, truck_number="CD-3", status="Retired")

    active = await db_manager.list_active_tractors(db_session)
    spare = await db_manager.list_tractors_by_status(db_session, "Spare")
    by_operator = await db_manager.list_tractors_by_operator(db_session, "E1")
    found = await db_manager.search_tractors(db_session, "Ab")
    needing = await db_manager.list_tractors_needing_service(db_session, 30)

    assert [t.truck_number for t in active] == ["AB-1"]
    assert [t.truck_number for t in spare] == ["ab-2"]
    assert [t.truck_number for t in by_operator] == ["AB-1"]
    assert sorted(t.truck_number for t in found) == ["AB-1", "ab-2"]
    assert sorted(t.truck_number for t in needing) == ["CD-3", "ab-2"]


@pytest.mark.anyio
async def test_history_limit_and_order(db_session):
    tractor = await make_tractor(db_session)
    for rating in (1, 2, 3):
        await db_manager.update_tractor(db_session, tractor.id, {"cleanliness_rating": rating}, USER)

    everything = await db_manager.list_history(db_session, tractor.id, 0)
    newest = await db_manager.list_history(db_session, tractor.id, 1)

    assert len(everything) == 3
    assert [row.new_value for row in newest] == ["3"]


@pytest.mark.anyio
async def test_cleanliness_history_window(db_session):
    tractor = await make_tractor(db_session)
    await db_manager.update_tractor(db_session, tractor.id, {"cleanliness_rating": 4, "make": "Volvo"}, USER)
    db_session.add(
        TractorHistory(
            tractor_id=tractor.id,
            field_name="cleanliness_rating",
            old_value="1",
            new_value="2",
            changed_at=datetime.now(timezone.utc) - timedelta(days=400),
            changed_by=USER,
        )
    )
    await db_session.commit()

    rows = await db_manager.list_cleanliness_history(db_session, tractor.id, 6)

    assert [(row.old_value, row.new_value) for row in rows] == [("0", "4")]


@pytest.mark.anyio
async def test_add_history_entry_rejects_untracked_field(db_session):
    tractor = await make_tractor(db_session)

    entry = await db_manager.add_history_entry(db_session, tractor.id, "status", "Active", "Spare", USER)
    assert entry.field_name == "status"

    with pytest.raises(ValidationError):
        await db_manager.add_history_entry(db_session, tractor.id, "updated_at", "a", "b", USER)


@pytest.mark.anyio
async def test_verify_stamps_updated_last_only(db_session):
    tractor = await make_tractor(db_session, assigned_operator="E1")

    verified = await db_manager.verify_tractor(db_session, tractor.id, "verifier")

    assert verified.updated_last is not None
    assert verified.updated_by == "verifier"
    assert verified.status == "Active"
    assert await history_rows(db_session, tractor.id) == []


@pytest.mark.anyio
async def test_comment_read_failure_is_a_persistence_error(db_session, monkeypatch):
    monkeypatch.setattr(
        comment_queries,
        "select_comments_for_tractor",
        lambda tractor_id: text("SELECT * FROM missing_comments_table"),
    )

    with pytest.raises(PersistenceError, match="missing_comments_table"):
        await comments_manager.list_comments(db_session, "t-1")


@pytest.mark.anyio
async def test_issue_write_failure_is_a_persistence_error(db_session, monkeypatch):
    monkeypatch.setattr(
        issue_queries,
        "delete_issue_by_id",
        lambda issue_id: text("DELETE FROM missing_issues_table"),
    )

    with pytest.raises(PersistenceError, match="missing_issues_table"):
        await issues_manager.delete_issue(db_session, "i-1")

    # the session is usable again after the rollback
    tractor = await make_tractor(db_session)
    assert await issues_manager.list_issues(db_session, tractor.id) == []

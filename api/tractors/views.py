# api/tractors/views.py
"""
Tractor lifecycle endpoints.

Command-style RPC: every operation is a POST whose last path segment names
it, e.g. ``POST /api/v1/tractor-service/update``.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from core.deps import RequestUserId, SYSTEM_USER_ID
from core.errors import FleetServiceError, to_http_exception
from .models import (
    TractorCreate,
    TractorUpdate,
    TractorIdRequest,
    VerifyRequest,
    HistoryRequest,
    OperatorRequest,
    StatusRequest,
    SearchRequest,
    NeedingServiceRequest,
    CleanlinessHistoryRequest,
    HistoryCreate,
    TractorRead,
    TractorDetail,
    TractorSummary,
    HistoryRead,
    SuccessResponse,
)
from . import db_manager

router = APIRouter(prefix="/tractor-service", tags=["tractors"])


@router.post(
    "/fetch-all",
    response_model=list[TractorSummary],
    summary="List tractors with history, issue and comment aggregates",
)
async def fetch_all_endpoint(
    db: AsyncSession = Depends(get_session),
) -> list[TractorSummary]:
    """
    All tractors ordered by truck number, each with latestHistoryDate,
    openIssuesCount and commentsCount.
    """
    try:
        rows = await db_manager.list_tractors_with_aggregates(db)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc

    return [
        TractorSummary(
            **TractorRead.model_validate(row["tractor"]).model_dump(),
            latest_history_date=row["latest_history_date"],
            open_issues_count=row["open_issues_count"],
            comments_count=row["comments_count"],
        )
        for row in rows
    ]


@router.post(
    "/fetch-by-id",
    response_model=TractorDetail | None,
    summary="Get one tractor with its latest history date",
)
async def fetch_by_id_endpoint(
    payload: TractorIdRequest,
    db: AsyncSession = Depends(get_session),
) -> TractorDetail | None:
    """Returns null when the id does not exist."""
    try:
        tractor, latest = await db_manager.get_tractor_with_latest_history(db, payload.id)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc

    if tractor is None:
        return None
    return TractorDetail(
        **TractorRead.model_validate(tractor).model_dump(),
        latest_history_date=latest,
    )


@router.post("/fetch-active", response_model=list[TractorRead], summary="List Active tractors")
async def fetch_active_endpoint(
    db: AsyncSession = Depends(get_session),
) -> list[TractorRead]:
    try:
        tractors = await db_manager.list_active_tractors(db)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return [TractorRead.model_validate(t) for t in tractors]


@router.post("/fetch-history", response_model=list[HistoryRead], summary="Audit trail for a tractor")
async def fetch_history_endpoint(
    payload: HistoryRequest,
    db: AsyncSession = Depends(get_session),
) -> list[HistoryRead]:
    """Newest first; ``limit`` caps the number of rows when positive."""
    try:
        rows = await db_manager.list_history(db, payload.tractor_id, payload.limit)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return [HistoryRead.model_validate(r) for r in rows]


@router.post(
    "/create",
    response_model=TractorRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tractor",
)
async def create_endpoint(
    payload: TractorCreate,
    db: AsyncSession = Depends(get_session),
) -> TractorRead:
    """Status defaults to Active. No history is recorded for creation."""
    data = payload.model_dump(exclude={"user_id"})
    try:
        tractor = await db_manager.create_tractor(db, data, payload.user_id)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return TractorRead.model_validate(tractor)


@router.post("/update", response_model=TractorRead, summary="Update a tractor")
async def update_endpoint(
    payload: TractorUpdate,
    db: AsyncSession = Depends(get_session),
) -> TractorRead:
    """
    Apply a partial update. Status and operator are reconciled before saving,
    so the response may differ from what was requested. One history row is
    written per tracked field that changed.
    """
    try:
        tractor = await db_manager.update_tractor(db, payload.id, payload.patch(), payload.user_id)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return TractorRead.model_validate(tractor)


@router.post("/delete", response_model=SuccessResponse, summary="Delete a tractor and its history")
async def delete_endpoint(
    payload: TractorIdRequest,
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    try:
        await db_manager.delete_tractor(db, payload.id)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return SuccessResponse()


@router.post("/fetch-by-operator", response_model=list[TractorRead], summary="Tractors assigned to an operator")
async def fetch_by_operator_endpoint(
    payload: OperatorRequest,
    db: AsyncSession = Depends(get_session),
) -> list[TractorRead]:
    try:
        tractors = await db_manager.list_tractors_by_operator(db, payload.operator_id)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return [TractorRead.model_validate(t) for t in tractors]


@router.post("/fetch-by-status", response_model=list[TractorRead], summary="Tractors with a given status")
async def fetch_by_status_endpoint(
    payload: StatusRequest,
    db: AsyncSession = Depends(get_session),
) -> list[TractorRead]:
    try:
        tractors = await db_manager.list_tractors_by_status(db, payload.status)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return [TractorRead.model_validate(t) for t in tractors]


@router.post("/search-by-truck-number", response_model=list[TractorRead], summary="Search by truck number")
async def search_by_truck_number_endpoint(
    payload: SearchRequest,
    db: AsyncSession = Depends(get_session),
) -> list[TractorRead]:
    try:
        tractors = await db_manager.search_tractors(db, payload.query)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return [TractorRead.model_validate(t) for t in tractors]


@router.post("/fetch-needing-service", response_model=list[TractorRead], summary="Tractors overdue for service")
async def fetch_needing_service_endpoint(
    payload: NeedingServiceRequest | None = None,
    db: AsyncSession = Depends(get_session),
) -> list[TractorRead]:
    """Never serviced, or last serviced more than ``dayThreshold`` days ago (SERVICE_INTERVAL_DAYS when omitted)."""
    payload = payload or NeedingServiceRequest()
    try:
        tractors = await db_manager.list_tractors_needing_service(db, payload.day_threshold)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return [TractorRead.model_validate(t) for t in tractors]


@router.post(
    "/fetch-cleanliness-history",
    response_model=list[HistoryRead],
    summary="Cleanliness rating changes over the last few months",
)
async def fetch_cleanliness_history_endpoint(
    payload: CleanlinessHistoryRequest | None = None,
    db: AsyncSession = Depends(get_session),
) -> list[HistoryRead]:
    payload = payload or CleanlinessHistoryRequest()
    try:
        rows = await db_manager.list_cleanliness_history(db, payload.tractor_id, payload.months)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return [HistoryRead.model_validate(r) for r in rows]


@router.post(
    "/add-history",
    response_model=HistoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record a manual audit entry",
)
async def add_history_endpoint(
    payload: HistoryCreate,
    header_user_id: RequestUserId,
    db: AsyncSession = Depends(get_session),
) -> HistoryRead:
    """
    Out-of-band audit row. ``changedBy`` falls back to the X-User-Id header,
    then to the system user.
    """
    changed_by = payload.changed_by or header_user_id or SYSTEM_USER_ID
    try:
        entry = await db_manager.add_history_entry(
            db,
            tractor_id=payload.tractor_id,
            field_name=payload.field_name,
            old_value=payload.old_value,
            new_value=payload.new_value,
            changed_by=changed_by,
        )
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return HistoryRead.model_validate(entry)


@router.post("/verify", response_model=TractorRead, summary="Mark a tractor as verified")
async def verify_endpoint(
    payload: VerifyRequest,
    header_user_id: RequestUserId,
    db: AsyncSession = Depends(get_session),
) -> TractorRead:
    user_id = payload.user_id or header_user_id
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User ID is required",
        )
    try:
        tractor = await db_manager.verify_tractor(db, payload.id, user_id)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return TractorRead.model_validate(tractor)

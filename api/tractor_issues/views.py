# api/tractor_issues/views.py
"""
Tractor maintenance issue endpoints (same RPC service as the tractor lifecycle).
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from core.errors import FleetServiceError, to_http_exception
from api.tractors.models import SuccessResponse
from .models import IssueListRequest, IssueCreate, IssueIdRequest, IssueRead
from . import db_manager

router = APIRouter(prefix="/tractor-service", tags=["tractor issues"])


@router.post("/fetch-issues", response_model=list[IssueRead], summary="Issues for a tractor")
async def fetch_issues_endpoint(
    payload: IssueListRequest,
    db: AsyncSession = Depends(get_session),
) -> list[IssueRead]:
    """Newest first, open and completed alike."""
    try:
        issues = await db_manager.list_issues(db, payload.tractor_id)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return [IssueRead.model_validate(i) for i in issues]


@router.post(
    "/add-issue",
    response_model=IssueRead,
    status_code=status.HTTP_201_CREATED,
    summary="Open a maintenance issue",
)
async def add_issue_endpoint(
    payload: IssueCreate,
    db: AsyncSession = Depends(get_session),
) -> IssueRead:
    """Severity outside Low / Medium / High is stored as Medium."""
    try:
        issue = await db_manager.add_issue(db, payload.tractor_id, payload.description, payload.severity)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return IssueRead.model_validate(issue)


@router.post("/complete-issue", response_model=SuccessResponse, summary="Complete an issue")
async def complete_issue_endpoint(
    payload: IssueIdRequest,
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    try:
        await db_manager.complete_issue(db, payload.issue_id)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return SuccessResponse()


@router.post("/delete-issue", response_model=SuccessResponse, summary="Delete an issue")
async def delete_issue_endpoint(
    payload: IssueIdRequest,
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    try:
        await db_manager.delete_issue(db, payload.issue_id)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return SuccessResponse()

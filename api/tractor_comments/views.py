# api/tractor_comments/views.py
"""
Tractor comment endpoints (same RPC service as the tractor lifecycle).
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from core.errors import FleetServiceError, to_http_exception
from api.tractors.models import SuccessResponse
from .models import CommentListRequest, CommentCreate, CommentDeleteRequest, CommentRead
from . import db_manager

router = APIRouter(prefix="/tractor-service", tags=["tractor comments"])


@router.post("/fetch-comments", response_model=list[CommentRead], summary="Comments for a tractor")
async def fetch_comments_endpoint(
    payload: CommentListRequest,
    db: AsyncSession = Depends(get_session),
) -> list[CommentRead]:
    """Newest first."""
    try:
        comments = await db_manager.list_comments(db, payload.tractor_id)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return [CommentRead.model_validate(c) for c in comments]


@router.post(
    "/add-comment",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment to a tractor",
)
async def add_comment_endpoint(
    payload: CommentCreate,
    db: AsyncSession = Depends(get_session),
) -> CommentRead:
    try:
        comment = await db_manager.add_comment(db, payload.tractor_id, payload.text, payload.author)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return CommentRead.model_validate(comment)


@router.post("/delete-comment", response_model=SuccessResponse, summary="Delete a comment")
async def delete_comment_endpoint(
    payload: CommentDeleteRequest,
    db: AsyncSession = Depends(get_session),
) -> SuccessResponse:
    try:
        await db_manager.delete_comment(db, payload.comment_id)
    except FleetServiceError as exc:
        raise to_http_exception(exc) from exc
    return SuccessResponse()

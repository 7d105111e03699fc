"""
Post submission and management endpoints
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from api.dependencies import get_post_orchestrator, get_post_store
from schemas.responses import (
    PostListResponse,
    PostResponse,
    PublishOutcomeResponse,
    SubmissionResponse,
    UploadResponse,
)
from services.post_orchestrator import MediaFile, PostDraft, PostOrchestrator, SubmissionResult, validate_file_size
from services.post_store import PostStore
from utils.auth import UserSession, get_current_session
from utils.exceptions import NotFoundError, handle_post_error
from utils.structured_logging import get_structured_logger

router = APIRouter()
logger = get_structured_logger(__name__)


async def _draft(
    title: str,
    content: Optional[str],
    post_type: str,
    account_ids: List[UUID],
    scheduled_for: Optional[datetime],
    file: Optional[UploadFile]
) -> PostDraft:
    media = None
    if post_type == "media" and file is not None and file.filename:
        if file.size is not None:
            # Oversized uploads are rejected on the multipart size alone
            validate_file_size(MediaFile(filename=file.filename, content_type=file.content_type, size=file.size))
        media = MediaFile(
            filename=file.filename,
            content_type=file.content_type,
            data=await file.read()
        )
    return PostDraft(
        title=title,
        content=content,
        post_type=post_type,
        account_ids=account_ids,
        scheduled_for=scheduled_for,
        media=media
    )


def _response(result: SubmissionResult) -> SubmissionResponse:
    return SubmissionResponse(
        post=PostResponse.from_post(result.post),
        succeeded=result.succeeded,
        failed=result.failed,
        results=[PublishOutcomeResponse(**r.model_dump(include={"account_id", "platform", "success", "url", "error"}))
                 for r in result.results],
        warnings=result.warnings,
        uploads=[UploadResponse(**u.model_dump(mode="json")) for u in result.uploads]
    )


@router.post("", response_model=SubmissionResponse, status_code=201)
async def submit_post(
    title: str = Form(""),
    content: Optional[str] = Form(None),
    post_type: str = Form("media", pattern="^(media|text)$"),
    account_ids: List[UUID] = Form([]),
    scheduled_for: Optional[datetime] = Form(None),
    file: Optional[UploadFile] = File(None),
    session: UserSession = Depends(get_current_session),
    orchestrator: PostOrchestrator = Depends(get_post_orchestrator)
) -> SubmissionResponse:
    """Publish or schedule a post to the selected accounts"""
    try:
        draft = await _draft(title, content, post_type, account_ids, scheduled_for, file)
        result = await orchestrator.submit(session, draft)
    except Exception as e:
        logger.warning("Post submission failed", error=str(e), error_type=type(e).__name__)
        raise handle_post_error(e)
    return _response(result)


@router.put("/{post_id}", response_model=SubmissionResponse)
async def edit_post(
    post_id: UUID,
    title: str = Form(""),
    content: Optional[str] = Form(None),
    post_type: str = Form("media", pattern="^(media|text)$"),
    account_ids: List[UUID] = Form([]),
    scheduled_for: Optional[datetime] = Form(None),
    file: Optional[UploadFile] = File(None),
    session: UserSession = Depends(get_current_session),
    orchestrator: PostOrchestrator = Depends(get_post_orchestrator)
) -> SubmissionResponse:
    """Update a post and, where possible, its published copies"""
    try:
        draft = await _draft(title, content, post_type, account_ids, scheduled_for, file)
        result = await orchestrator.edit(session, post_id, draft)
    except Exception as e:
        logger.warning("Post edit failed", post_id=str(post_id), error=str(e), error_type=type(e).__name__)
        raise handle_post_error(e)
    return _response(result)


@router.get("", response_model=PostListResponse)
async def list_posts(
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    session: UserSession = Depends(get_current_session),
    store: PostStore = Depends(get_post_store)
) -> PostListResponse:
    """The current user's posts, newest first"""
    try:
        posts, total = await store.list(session.user_id, page=page, per_page=per_page)
    except Exception as e:
        raise handle_post_error(e)
    return PostListResponse(
        items=[PostResponse.from_post(post) for post in posts],
        total=total,
        page=page,
        per_page=per_page
    )


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: UUID,
    session: UserSession = Depends(get_current_session),
    store: PostStore = Depends(get_post_store)
) -> PostResponse:
    try:
        post = await store.get(session.user_id, post_id)
    except Exception as e:
        raise handle_post_error(e)
    return PostResponse.from_post(post)


@router.delete("/{post_id}")
async def delete_post(
    post_id: UUID,
    session: UserSession = Depends(get_current_session),
    store: PostStore = Depends(get_post_store)
):
    try:
        deleted = await store.delete(session.user_id, post_id)
    except Exception as e:
        raise handle_post_error(e)
    if not deleted:
        raise handle_post_error(NotFoundError("Post not found", {"post_id": str(post_id)}))
    return {"message": "Post deleted successfully"}

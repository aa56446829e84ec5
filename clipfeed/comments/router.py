"""Comment API endpoints.

Provides routes for:
- Posting comments and replies
- Listing a video's comments (threaded or flat)
- Deleting a comment with its replies
"""

from uuid import UUID

import structlog
from fastapi import APIRouter, Query, status

from clipfeed.auth.dependencies import CurrentUser
from clipfeed.core.errors import EngineError, handle_engine_error

from .dependencies import CommentServiceDep
from .models import CommentThread
from .schemas import (
    CommentListResponse,
    CommentResponse,
    CommentWithRepliesResponse,
    CreateCommentRequest,
    DeleteCommentResponse,
)


logger = structlog.get_logger(__name__)


router = APIRouter(prefix="/v1/comments", tags=["comments"])


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
async def create_comment(
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> CommentResponse:
    """Create a comment on a video, or a reply when ``parent_id`` is set.

    Rate limited to 10/min, 100/hour per account.
    """
    try:
        comment = await comment_service.add_comment(
            author_id=user.id,
            video_id=data.video_id,
            content=data.content,
            parent_id=data.parent_id,
        )
    except EngineError as e:
        raise handle_engine_error(e) from e
    return CommentResponse.from_comment(comment)


@router.get(
    "/video/{video_id}",
    response_model=CommentListResponse,
    summary="List comments of a video",
)
async def list_comments(
    video_id: UUID,
    comment_service: CommentServiceDep,
    nested: bool = Query(True, description="Group replies under their comment"),
) -> CommentListResponse:
    """Threaded: newest comments first, replies oldest first. Flat: newest first."""
    try:
        result = await comment_service.list_comments(video_id, nested=nested)
    except EngineError as e:
        raise handle_engine_error(e) from e

    if nested:
        items = [CommentWithRepliesResponse.from_thread(thread) for thread in result]
    else:
        items = [
            CommentWithRepliesResponse.from_thread(CommentThread(comment=comment))
            for comment in result
        ]
    return CommentListResponse(items=items, total=len(items))


@router.delete(
    "/{comment_id}",
    response_model=DeleteCommentResponse,
    summary="Delete comment",
)
async def delete_comment(
    comment_id: UUID,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> DeleteCommentResponse:
    """Delete an own comment together with its replies."""
    try:
        removed = await comment_service.delete_comment(comment_id, user.id)
    except EngineError as e:
        raise handle_engine_error(e) from e
    return DeleteCommentResponse(removed=removed)

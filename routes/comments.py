from fastapi import APIRouter, Depends, Query
from typing import Optional
import config
from errors import ValidationError
from schemas import CommentCreate
from services import comments as comment_service
from utils.route_helpers import get_current_user_id, envelope

router = APIRouter(prefix="/comments", tags=["comments"])

@router.get("/{forum_id}")
def list_comments(
    forum_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
):
    comments, pagination = comment_service.list_comments(forum_id, page, limit)
    return envelope(comments, pagination)

@router.post("/{forum_id}", status_code=201)
def create_comment(forum_id: int, comment: CommentCreate, current_user_id: int = Depends(get_current_user_id)):
    return envelope(comment_service.create_comment(current_user_id, forum_id, comment.content))

@router.delete("/{forum_id}")
def delete_comment(
    forum_id: int,
    comment_id: Optional[int] = Query(None, alias="commentId"),
    current_user_id: int = Depends(get_current_user_id),
):
    if comment_id is None:
        raise ValidationError("Comment ID is required")
    comment_service.delete_comment(current_user_id, comment_id, forum_id=forum_id)
    return {"success": True, "message": "Comment deleted successfully"}

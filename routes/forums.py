from fastapi import APIRouter, Depends, Query
from typing import Optional
import config
from schemas import ForumCreate, ForumUpdate
from services import forums as forum_service
from services import likes as like_service
from services.forums import ForumFilter
from utils.route_helpers import get_current_user_id, get_optional_user_id, envelope

router = APIRouter(prefix="/forums", tags=["forums"])

@router.get("")
def list_forums(
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
):
    filters = ForumFilter(search=search or None, tag=tag or None)
    forums, pagination = forum_service.list_forums(page, limit, filters)
    return envelope(forums, pagination)

@router.post("", status_code=201)
def create_forum(forum: ForumCreate, current_user_id: int = Depends(get_current_user_id)):
    created = forum_service.create_forum(current_user_id, forum.title, forum.description, forum.tags)
    return envelope(created)

@router.get("/{forum_id}")
def get_forum(forum_id: int, viewer_id: Optional[int] = Depends(get_optional_user_id)):
    return envelope(forum_service.get_forum(forum_id, viewer_id))

@router.patch("/{forum_id}")
def update_forum(forum_id: int, forum: ForumUpdate, current_user_id: int = Depends(get_current_user_id)):
    updated = forum_service.update_forum(
        current_user_id, forum_id, title=forum.title, description=forum.description, tags=forum.tags
    )
    return envelope(updated)

@router.delete("/{forum_id}")
def delete_forum(forum_id: int, current_user_id: int = Depends(get_current_user_id)):
    forum_service.delete_forum(current_user_id, forum_id)
    return envelope()

@router.get("/{forum_id}/likes")
def get_forum_likes(forum_id: int, viewer_id: Optional[int] = Depends(get_optional_user_id)):
    return envelope(like_service.get_like_status(forum_id, viewer_id))

@router.post("/{forum_id}/likes")
def toggle_forum_like(forum_id: int, current_user_id: int = Depends(get_current_user_id)):
    return envelope(like_service.toggle_like(forum_id, current_user_id))

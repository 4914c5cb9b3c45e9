from fastapi import APIRouter, Depends
from services import forums as forum_service
from utils.route_helpers import get_current_user_id, envelope

router = APIRouter(prefix="/profile", tags=["profile"])

@router.get("/forums")
def get_my_forums(current_user_id: int = Depends(get_current_user_id)):
    """Forums written by the current user, newest first"""
    return envelope(forum_service.list_user_forums(current_user_id))

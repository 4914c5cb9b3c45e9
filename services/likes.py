import logging
import sqlite3
from typing import Optional

from database import get_db
from schemas.forums import LikeStatus
from services.lookups import require_forum

logger = logging.getLogger(__name__)


def count_likes(cursor, forum_id: int) -> int:
    cursor.execute("SELECT COUNT(*) FROM likes WHERE forum_id = ?", (forum_id,))
    return cursor.fetchone()[0]


def user_has_liked(cursor, forum_id: int, user_id: int) -> bool:
    cursor.execute("SELECT 1 FROM likes WHERE forum_id = ? AND user_id = ?", (forum_id, user_id))
    return cursor.fetchone() is not None


def toggle_like(forum_id: int, user_id: int) -> LikeStatus:
    """Like the forum if the user has not, otherwise remove the like.

    A concurrent toggle that inserted the same pair first makes our insert
    fail on the primary key; that outcome is reported as liked.
    """
    with get_db() as conn:
        cursor = conn.cursor()
        require_forum(cursor, forum_id)
        cursor.execute("DELETE FROM likes WHERE forum_id = ? AND user_id = ?", (forum_id, user_id))
        if cursor.rowcount:
            liked = False
        else:
            try:
                cursor.execute("INSERT INTO likes (forum_id, user_id) VALUES (?, ?)", (forum_id, user_id))
            except sqlite3.IntegrityError:
                logger.info("Like for forum %s by user %s already exists", forum_id, user_id)
            liked = True
        conn.commit()
        return LikeStatus(liked=liked, like_count=count_likes(cursor, forum_id))


def get_like_status(forum_id: int, user_id: Optional[int] = None) -> LikeStatus:
    with get_db() as conn:
        cursor = conn.cursor()
        require_forum(cursor, forum_id)
        liked = user_has_liked(cursor, forum_id, user_id) if user_id is not None else False
        return LikeStatus(liked=liked, like_count=count_likes(cursor, forum_id))

import logging
from typing import List, Optional

import config
from database import get_db
from errors import Forbidden, NotFound, ValidationError
from schemas.forums import CommentResponse
from schemas.shared import Pagination, UserSummary
from services.lookups import require_forum
from services.policy import can_mutate

logger = logging.getLogger(__name__)

COMMENT_SELECT = """
    SELECT c.id, c.content, c.forum_id, c.user_id, c.created_at, u.name, u.image
    FROM comments c
    JOIN users u ON u.id = c.user_id
"""
NEWEST_FIRST = " ORDER BY c.created_at DESC, c.id DESC"


def _row_to_comment(row) -> CommentResponse:
    return CommentResponse(
        id=row[0],
        content=row[1],
        forum_id=row[2],
        author_id=row[3],
        created_at=row[4],
        user=UserSummary(id=row[3], name=row[5], image=row[6]),
    )


def fetch_forum_comments(cursor, forum_id: int) -> List[CommentResponse]:
    """All comments of a forum, newest first, on an already open cursor"""
    cursor.execute(COMMENT_SELECT + " WHERE c.forum_id = ?" + NEWEST_FIRST, (forum_id,))
    return [_row_to_comment(row) for row in cursor.fetchall()]


def list_comments(forum_id: int, page: int = 1, page_size: int = config.DEFAULT_PAGE_SIZE):
    if page < 1:
        raise ValidationError("Page must be at least 1")
    if page_size < 1:
        raise ValidationError("Limit must be greater than 0")
    with get_db() as conn:
        cursor = conn.cursor()
        require_forum(cursor, forum_id)
        cursor.execute("SELECT COUNT(*) FROM comments WHERE forum_id = ?", (forum_id,))
        total = cursor.fetchone()[0]
        offset = (page - 1) * page_size
        comments = []
        if offset < total:
            cursor.execute(
                COMMENT_SELECT + " WHERE c.forum_id = ?" + NEWEST_FIRST + " LIMIT ? OFFSET ?",
                (forum_id, page_size, offset),
            )
            comments = [_row_to_comment(row) for row in cursor.fetchall()]
    return comments, Pagination.build(total, page, page_size)


def create_comment(actor_id: int, forum_id: int, content: Optional[str]) -> CommentResponse:
    # The forum must exist before the body is looked at.
    with get_db() as conn:
        cursor = conn.cursor()
        require_forum(cursor, forum_id)
        content = content.strip() if content else ""
        if not content:
            raise ValidationError("Content is required")
        if len(content) > config.MAX_COMMENT_LENGTH:
            raise ValidationError(f"Content must be at most {config.MAX_COMMENT_LENGTH} characters long")
        cursor.execute(
            "INSERT INTO comments (forum_id, user_id, content) VALUES (?, ?, ?)",
            (forum_id, actor_id, content),
        )
        comment_id = cursor.lastrowid
        conn.commit()
        cursor.execute(COMMENT_SELECT + " WHERE c.id = ?", (comment_id,))
        return _row_to_comment(cursor.fetchone())


def delete_comment(actor_id: int, comment_id: int, forum_id: Optional[int] = None):
    """Delete a comment owned by the actor.

    When ``forum_id`` is given the comment must belong to that forum.
    """
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT user_id, forum_id FROM comments WHERE id = ?", (comment_id,))
        row = cursor.fetchone()
        if not row or (forum_id is not None and row[1] != forum_id):
            raise NotFound("Comment not found")
        if not can_mutate(actor_id, row[0]):
            raise Forbidden("Not authorized to delete this comment")
        cursor.execute("DELETE FROM comments WHERE id = ?", (comment_id,))
        conn.commit()
    logger.info("User %s deleted comment %s", actor_id, comment_id)

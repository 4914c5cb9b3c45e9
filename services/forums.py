"""Forum CRUD, listing and search.

Every mutating function takes the acting user's id explicitly; ownership is
checked with ``policy.can_mutate`` after the existence check and before any
input validation.
"""

import json
import logging
import sqlite3
from dataclasses import dataclass
from typing import List, Optional

import config
from database import get_db
from errors import Forbidden, NotFound, ValidationError
from schemas.forums import ForumResponse, ForumDetailResponse
from schemas.shared import Pagination, UserSummary
from services.comments import fetch_forum_comments
from services.likes import user_has_liked
from services.lookups import require_forum
from services.policy import can_mutate

logger = logging.getLogger(__name__)

FORUM_SELECT = """
    SELECT f.id, f.title, f.description, f.tags, f.user_id, f.created_at, f.updated_at,
           u.name, u.image,
           (SELECT COUNT(*) FROM comments c WHERE c.forum_id = f.id) AS comment_count,
           (SELECT COUNT(*) FROM likes l WHERE l.forum_id = f.id) AS like_count
    FROM forums f
    JOIN users u ON u.id = f.user_id
"""


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class ForumFilter:
    """Optional forum list predicates, combined with AND."""

    search: Optional[str] = None
    tag: Optional[str] = None
    author_id: Optional[int] = None

    def to_sql(self):
        clauses = []
        params = []
        if self.search:
            pattern = f"%{_escape_like(self.search.casefold())}%"
            clauses.append(
                "(casefold(f.title) LIKE ? ESCAPE '\\' OR casefold(f.description) LIKE ? ESCAPE '\\')"
            )
            params.extend([pattern, pattern])
        if self.tag:
            clauses.append("EXISTS (SELECT 1 FROM json_each(f.tags) WHERE json_each.value = ?)")
            params.append(self.tag)
        if self.author_id is not None:
            clauses.append("f.user_id = ?")
            params.append(self.author_id)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params


def _row_to_forum(row) -> ForumResponse:
    return ForumResponse(
        id=row[0],
        title=row[1],
        description=row[2],
        tags=json.loads(row[3]) if row[3] else [],
        author_id=row[4],
        created_at=row[5],
        updated_at=row[6],
        user=UserSummary(id=row[4], name=row[7], image=row[8]),
        comment_count=row[9],
        like_count=row[10],
    )


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _check_length(value: str, limit: int, field: str):
    if len(value) > limit:
        raise ValidationError(f"{field} must be at most {limit} characters long")


def _clean_tags(tags: Optional[List[str]]) -> List[str]:
    if not tags:
        return []
    cleaned = [tag.strip() for tag in tags if tag and tag.strip()]
    if len(cleaned) > config.MAX_TAGS:
        raise ValidationError(f"Maximum {config.MAX_TAGS} tags allowed")
    for tag in cleaned:
        _check_length(tag, config.MAX_TAG_LENGTH, "Tag")
    return cleaned


def _fetch_forum(cursor, forum_id: int) -> ForumResponse:
    cursor.execute(FORUM_SELECT + " WHERE f.id = ?", (forum_id,))
    row = cursor.fetchone()
    if not row:
        raise NotFound("Forum not found")
    return _row_to_forum(row)


def list_forums(page: int = 1, page_size: int = config.DEFAULT_PAGE_SIZE, filters: ForumFilter = None):
    """Return one newest-first page of forums and its pagination block."""
    if page < 1:
        raise ValidationError("Page must be at least 1")
    if page_size < 1:
        raise ValidationError("Limit must be greater than 0")
    filters = filters or ForumFilter()
    where, params = filters.to_sql()
    offset = (page - 1) * page_size
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"SELECT COUNT(*) FROM forums f{where}", params)
        total = cursor.fetchone()[0]
        forums = []
        # Past the last page the offset can exceed SQLite's integer range
        if offset < total:
            cursor.execute(
                f"{FORUM_SELECT}{where} ORDER BY f.created_at DESC, f.id DESC LIMIT ? OFFSET ?",
                params + [page_size, offset],
            )
            forums = [_row_to_forum(row) for row in cursor.fetchall()]
    return forums, Pagination.build(total, page, page_size)


def list_user_forums(user_id: int) -> List[ForumResponse]:
    """All forums written by one user, newest first."""
    where, params = ForumFilter(author_id=user_id).to_sql()
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"{FORUM_SELECT}{where} ORDER BY f.created_at DESC, f.id DESC", params)
        return [_row_to_forum(row) for row in cursor.fetchall()]


def get_forum(forum_id: int, viewer_id: Optional[int] = None) -> ForumDetailResponse:
    """Forum with author, newest-first comments, like count and the viewer's like."""
    with get_db() as conn:
        cursor = conn.cursor()
        forum = _fetch_forum(cursor, forum_id)
        comments = fetch_forum_comments(cursor, forum_id)
        liked = user_has_liked(cursor, forum_id, viewer_id) if viewer_id is not None else False
    return ForumDetailResponse(**forum.model_dump(), comments=comments, user_has_liked=liked)


def create_forum(actor_id: int, title: Optional[str], description: Optional[str], tags: Optional[List[str]] = None) -> ForumResponse:
    title = _clean_text(title)
    description = _clean_text(description)
    if not title or not description:
        raise ValidationError("Title and description are required")
    _check_length(title, config.MAX_TITLE_LENGTH, "Title")
    _check_length(description, config.MAX_DESCRIPTION_LENGTH, "Description")
    tags = _clean_tags(tags)
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO forums (user_id, title, description, tags) VALUES (?, ?, ?, ?)",
            (actor_id, title, description, json.dumps(tags)),
        )
        forum_id = cursor.lastrowid
        conn.commit()
        forum = _fetch_forum(cursor, forum_id)
    logger.info("User %s created forum %s", actor_id, forum_id)
    return forum


def update_forum(actor_id: int, forum_id: int, title: Optional[str] = None, description: Optional[str] = None,
                 tags: Optional[List[str]] = None) -> ForumResponse:
    """Apply a partial update; omitted or blank fields keep their stored value."""
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT user_id, title, description, tags FROM forums WHERE id = ?", (forum_id,))
        row = cursor.fetchone()
        if not row:
            raise NotFound("Forum not found")
        owner_id, old_title, old_description, old_tags = row
        if not can_mutate(actor_id, owner_id):
            raise Forbidden("You can only edit your own forums")

        title = _clean_text(title)
        description = _clean_text(description)
        if title is not None:
            _check_length(title, config.MAX_TITLE_LENGTH, "Title")
        if description is not None:
            _check_length(description, config.MAX_DESCRIPTION_LENGTH, "Description")
        new_tags = json.dumps(_clean_tags(tags)) if tags is not None else old_tags

        cursor.execute(
            "UPDATE forums SET title = ?, description = ?, tags = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (title or old_title, description or old_description, new_tags, forum_id),
        )
        conn.commit()
        return _fetch_forum(cursor, forum_id)


def delete_forum(actor_id: int, forum_id: int):
    """Delete a forum together with its likes and comments, atomically."""
    with get_db() as conn:
        cursor = conn.cursor()
        owner_id = require_forum(cursor, forum_id)
        if not can_mutate(actor_id, owner_id):
            raise Forbidden("You can only delete your own forums")
        try:
            cursor.execute("DELETE FROM likes WHERE forum_id = ?", (forum_id,))
            cursor.execute("DELETE FROM comments WHERE forum_id = ?", (forum_id,))
            cursor.execute("DELETE FROM forums WHERE id = ?", (forum_id,))
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
    logger.info("User %s deleted forum %s", actor_id, forum_id)

from errors import NotFound


def require_forum(cursor, forum_id: int) -> int:
    """Return the forum's author id, raising NotFound if it does not exist"""
    cursor.execute("SELECT user_id FROM forums WHERE id = ?", (forum_id,))
    row = cursor.fetchone()
    if not row:
        raise NotFound("Forum not found")
    return row[0]

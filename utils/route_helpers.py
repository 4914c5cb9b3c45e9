from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from auth import verify_token
from database import get_db
from errors import Unauthenticated

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

def _user_exists(user_id: int) -> bool:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT 1 FROM users WHERE id = ?", (user_id,))
        return cursor.fetchone() is not None

def get_optional_user_id(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[int]:
    """Resolve the caller once per request; None for anonymous or invalid sessions"""
    if not token:
        return None
    user_id = verify_token(token)
    if user_id is None or not _user_exists(user_id):
        return None
    return user_id

def get_current_user_id(token: Optional[str] = Depends(oauth2_scheme)) -> int:
    """Resolve the caller or fail with Unauthenticated"""
    if not token:
        raise Unauthenticated()
    user_id = verify_token(token)
    if user_id is None:
        raise Unauthenticated("Invalid token")
    if not _user_exists(user_id):
        raise Unauthenticated("User not found")
    return user_id

def envelope(data=None, pagination=None) -> dict:
    """Wrap a payload in the {success, data, pagination} response envelope"""
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if pagination is not None:
        body["pagination"] = pagination
    return body

from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from schemas.shared import CamelModel, UserSummary

# Request bodies are checked field by field in the services so that the
# existence and ownership checks run before content validation.

class ForumCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None

class ForumUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None

class CommentCreate(BaseModel):
    content: Optional[str] = None

class CommentResponse(CamelModel):
    id: int
    content: str
    forum_id: int
    author_id: int
    created_at: datetime
    user: UserSummary

class ForumResponse(CamelModel):
    id: int
    title: str
    description: str
    tags: List[str] = []
    author_id: int
    created_at: datetime
    updated_at: datetime
    user: UserSummary
    comment_count: int = 0
    like_count: int = 0

class ForumDetailResponse(ForumResponse):
    comments: List[CommentResponse] = []
    user_has_liked: bool = False

class LikeStatus(CamelModel):
    liked: bool
    like_count: int

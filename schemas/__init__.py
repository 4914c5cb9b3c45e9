# Schemas package
from .shared import CamelModel, UserSummary, Pagination
from .auth import SignupRequest, LoginRequest, UserResponse, Token, OAuthAuthURL
from .forums import ForumCreate, ForumUpdate, ForumResponse, ForumDetailResponse, CommentCreate, CommentResponse, LikeStatus

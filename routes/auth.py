from typing import Optional
from fastapi import APIRouter, Cookie, Depends, Query, Response
import config
from schemas.auth import SignupRequest, LoginRequest, Token, OAuthAuthURL
from auth import issue_session_token
from errors import NotFound
from oauth_github import github_oauth
from services import accounts
from utils.route_helpers import get_current_user_id, envelope

router = APIRouter(prefix="/auth", tags=["authentication"])

OAUTH_COOKIE_PATH = "/auth/oauth"

def _token_for(user) -> Token:
    return Token(access_token=issue_session_token(user.id), token_type="bearer", user=user)

@router.post("/signup", status_code=201)
def signup(user: SignupRequest):
    created = accounts.register_user(user.name, user.email, user.password)
    return envelope(created)

@router.post("/login")
def login(login_data: LoginRequest):
    user = accounts.authenticate_credentials(login_data.email, login_data.password)
    return envelope(_token_for(user))

@router.get("/me")
def get_current_user(current_user_id: int = Depends(get_current_user_id)):
    """Get current user information from the session token"""
    user = accounts.get_user_by_id(current_user_id)
    if user is None:
        raise NotFound("User not found")
    return envelope(user)

# OAuth Routes
@router.get("/oauth/github")
def github_oauth_login(response: Response):
    """Initiate GitHub OAuth login; the state is also kept in an HttpOnly cookie"""
    auth_data = github_oauth.generate_auth_url()
    response.set_cookie(
        key="oauth_state",
        value=auth_data['state'],
        httponly=True,
        max_age=config.OAUTH_STATE_EXPIRE_MINUTES * 60,
        path=OAUTH_COOKIE_PATH,
        samesite="lax",
        secure=config.OAUTH_COOKIE_SECURE,
    )
    return envelope(OAuthAuthURL(auth_url=auth_data['auth_url'], state=auth_data['state']))

@router.get("/oauth/github/callback")
def github_oauth_callback(
    response: Response,
    code: str = Query(...),
    state: str = Query(...),
    oauth_state: Optional[str] = Cookie(None),
):
    """Handle GitHub OAuth callback: reconcile the identity and issue a session"""
    # A state cookie is good for one successful sign-in
    response.delete_cookie(key="oauth_state", path=OAUTH_COOKIE_PATH)
    identity = github_oauth.handle_oauth_callback(code, state, oauth_state)
    user = accounts.sign_in_oauth(identity)
    return envelope(_token_for(user))

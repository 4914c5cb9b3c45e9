from pydantic import BaseModel
from typing import Optional
from schemas.shared import CamelModel

class SignupRequest(BaseModel):
    name: str
    email: str
    password: str

class LoginRequest(BaseModel):
    email: str
    password: str

class UserResponse(CamelModel):
    id: int
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None

class Token(CamelModel):
    access_token: str
    token_type: str
    user: UserResponse

class OAuthAuthURL(CamelModel):
    auth_url: str
    state: str

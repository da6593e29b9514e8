"""
User and session data models for SmartStudy
"""
from pydantic import BaseModel, Field
from typing import Optional

from smartstudy.models.common import new_id, utc_timestamp


class User(BaseModel):
    """A registered user"""
    id: str = Field(default_factory=new_id)
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Login email, stored lower-cased")
    created_at: str = Field(default_factory=utc_timestamp)


class Session(BaseModel):
    """
    Explicit session context handed to every repository call.
    Repositories scope all reads and writes to ``session.user.id``.
    """
    user: User
    access_token: Optional[str] = Field(default=None, description="Bearer token the session was opened or resolved with")
    started_at: str = Field(default_factory=utc_timestamp)

    @property
    def user_id(self) -> str:
        return self.user.id


# API Request/Response models
class LoginRequest(BaseModel):
    """Request to log in"""
    email: str
    password: str


class SignupRequest(BaseModel):
    """Request to register a new user"""
    name: str
    email: str
    password: str
    confirm_password: str


class UpdateProfileRequest(BaseModel):
    """Partial profile update, unset fields are left alone"""
    name: Optional[str] = None
    email: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    """Request to replace the current user's password"""
    new_password: str
    confirm_password: str


class AuthResponse(BaseModel):
    """Response carrying the current user, and a bearer token after login or signup"""
    success: bool
    user: Optional[User] = None
    access_token: Optional[str] = None
    token_type: str = "bearer"
    message: str

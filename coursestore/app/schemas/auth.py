"""
Authentication request and response schemas.
"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from coursestore.app.models.user import UserRole


class UserRegister(BaseModel):
    """Self-registration always creates a STUDENT account; a ``role`` field is ignored."""
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)


class UserLogin(BaseModel):
    username: str = Field(..., description="Username or email")
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user_id: int
    username: str
    email: str
    role: UserRole


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

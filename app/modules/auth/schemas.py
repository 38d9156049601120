from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Literal, Optional
from datetime import datetime

ROLES = ("owner", "admin", "seller", "accountant", "viewer")
Role = Literal["owner", "admin", "seller", "accountant", "viewer"]


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=2, max_length=120)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if v.strip() != v:
            raise ValueError('Password cannot start or end with whitespace')
        return v


class UserOut(BaseModel):
    id: int
    email: EmailStr
    full_name: str
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UserRoleUpdate(BaseModel):
    role: Role


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserOut


class AuthContext(BaseModel):
    """Per-request session object decoded from the bearer token."""
    user_id: int
    email: str
    role: str

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from mentorconnect.models.user import UserRole
from mentorconnect.schemas.user import UserResponse


class UserSignup(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=255)

    @field_validator('full_name')
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Full name is required")
        return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str
    # Portal the user signs in through; checked against the registered role
    role: Optional[UserRole] = None


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(Token):
    user: UserResponse

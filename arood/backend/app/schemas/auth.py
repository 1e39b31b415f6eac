# backend/app/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from app.schemas.user import User


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)

    class Config:
        extra = "forbid"


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    business_name: Optional[str] = Field(None, max_length=255)
    business_city: Optional[str] = Field(None, max_length=100)
    business_phone: Optional[str] = Field(None, max_length=50)

    class Config:
        extra = "forbid"


class SessionResponse(BaseModel):
    user: User
    access_token: str
    token_type: str = "bearer"

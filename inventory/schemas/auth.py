from pydantic import BaseModel
from typing import Optional


class RegisterRequest(BaseModel):
    """Registration body. Username and password are required."""
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None


class RegisterResponse(BaseModel):
    success: bool = True
    userId: int


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserInfo(BaseModel):
    """User claims carried by a token."""
    id: int
    username: str
    role: str


class LoginResponse(BaseModel):
    token: str
    user: UserInfo

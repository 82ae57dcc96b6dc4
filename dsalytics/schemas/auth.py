"""
Pydantic schemas for authentication
"""
from pydantic import BaseModel, Field
from typing import Optional


class Principal(BaseModel):
    """Identity resolved for the current request"""
    id: str
    name: str
    email: str
    role: str = "user"


class RegisterRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, max_length=72)


class LoginRequest(BaseModel):
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, max_length=72)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: Principal

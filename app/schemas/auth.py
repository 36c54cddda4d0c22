"""
Advocacia SaaS - Auth Schemas
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refreshToken: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Cadastro com chave de registro emitida pelo admin"""
    email: EmailStr
    password: str = Field(..., min_length=8, description="Mínimo 8 caracteres")
    name: str = Field(..., min_length=2, max_length=255)
    key: str = Field(..., min_length=1, description="Chave de registro")


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = Field(None, min_length=8)


class TokenPair(BaseModel):
    accessToken: str
    refreshToken: str


class AdminLoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

from typing import Optional

from pydantic import BaseModel, EmailStr


class Token(BaseModel):
    """Bearer Access Token"""

    access_token: str
    token_type: str


class TokenPayload(BaseModel):
    """Payload for Bearer Access Token"""
    sub: str  # user id
    name: str
    role: str
    employee_id: Optional[str] = None
    exp: int
    iat: int


class LoginRequestAdmin(BaseModel):
    email: str
    password: str


class LoginRequestEmployee(BaseModel):
    employee_id: str


class AdminCreate(BaseModel):
    email: EmailStr
    name: str
    password: str

"""Login schemas."""
from pydantic import BaseModel

from .session import SessionPayload


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    user: SessionPayload
    redirect_to: str

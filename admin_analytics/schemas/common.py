"""Common/shared response schemas."""
from pydantic import BaseModel


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class LoginResponse(BaseModel):
    success: bool = True
    session_id: int
    session_token: str


class ErrorResponse(BaseModel):
    error: str

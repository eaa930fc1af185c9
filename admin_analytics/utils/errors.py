"""Custom error definitions for API exceptions.

Every error is rendered as ``{"error": <detail>}`` by the handlers in
``admin_analytics.middleware.error_handler``.
"""
from fastapi import HTTPException
from starlette import status


class ValidationError(HTTPException):
    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AuthError(HTTPException):
    def __init__(self, detail: str = "Admin session token required"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidReportType(HTTPException):
    def __init__(self, detail: str = "Invalid report type"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class EmptyResultError(HTTPException):
    def __init__(self, detail: str = "No rows to export"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

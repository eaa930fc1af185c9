"""Request bodies for the tracking API."""
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator

from admin_analytics.core.constants import Severity


class LoginRequest(BaseModel):
    admin_id: int


class LogoutRequest(BaseModel):
    session_id: int
    admin_id: int


class ActivityRequest(BaseModel):
    activity_type: str = Field(..., min_length=1, max_length=50)
    activity_category: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1)
    target_resource: Optional[str] = Field(None, max_length=100)
    target_id: Optional[Union[int, str]] = None
    old_values: Optional[Any] = None
    new_values: Optional[Any] = None
    additional_data: Optional[Any] = None


class PageVisitRequest(BaseModel):
    page_name: str = Field(..., min_length=1, max_length=255)
    page_url: str = Field(..., min_length=1)
    visit_duration: Optional[int] = Field(0, ge=0)
    referrer_url: Optional[str] = None
    screen_resolution: Optional[str] = Field(None, max_length=20)
    browser_name: Optional[str] = Field(None, max_length=50)
    browser_version: Optional[str] = Field(None, max_length=20)
    os_name: Optional[str] = Field(None, max_length=50)
    device_type: Optional[str] = Field(None, max_length=20)


class SecurityEventRequest(BaseModel):
    event_type: str = Field(..., min_length=1, max_length=50)
    event_severity: str
    event_description: str = Field(..., min_length=1)
    admin_id: Optional[int] = None
    additional_data: Optional[Any] = None

    @field_validator("event_severity")
    def validate_severity(cls, v):
        value = str(v).upper()
        if value not in Severity.__members__:
            raise ValueError("must be one of LOW, MEDIUM, HIGH, CRITICAL")
        return value

"""
Pydantic schemas for the public content endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional


class ContentViewRequest(BaseModel):
    """Best-effort client analytics sent when a guest views a content page."""

    view_duration: Optional[float] = Field(None, ge=0, description="Seconds on page")
    user_agent: Optional[str] = Field(None, max_length=500)
    referrer: Optional[str] = Field(None, max_length=1000)
    viewport_size: Optional[str] = Field(None, max_length=50, examples=["390x844"])

"""
Success envelope shared by every JSON endpoint.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class APIResponse(BaseModel):
    """`{success, message?, data?}` body returned on success."""

    success: bool = Field(True, description="Whether the request succeeded")
    message: Optional[str] = Field(None, description="Short outcome summary")
    data: Optional[Any] = Field(None, description="Response payload")


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """Build the success envelope; `message` is omitted when not given."""
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body

"""OAuth 2.0 error response schema."""

from typing import Any, List, Optional
from pydantic import BaseModel, Field, ValidationError


class OAuthErrorResponse(BaseModel):
    """RFC 6749 error response."""

    error: str = Field(..., description="Error code")
    error_description: Optional[str] = Field(
        None,
        description="Human-readable error description"
    )
    details: Optional[List[Any]] = Field(
        None,
        description="Validation issues, when the request failed schema checks"
    )


def validation_details(exc: ValidationError) -> List[dict]:
    """Summarize validation issues without echoing the rejected values."""
    return exc.errors(include_url=False, include_context=False, include_input=False)

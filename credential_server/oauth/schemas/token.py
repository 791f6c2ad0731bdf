"""OAuth 2.0 token endpoint schemas."""

from typing import Literal, Optional
from pydantic import BaseModel, Field

from credential_server.oauth.schemas.fields import UuidStr


class TokenRequest(BaseModel):
    """OAuth 2.0 token request."""

    grant_type: Literal["authorization_code", "refresh_token"] = Field(
        ...,
        description="OAuth 2.0 grant type"
    )
    client_id: Optional[UuidStr] = Field(default=None, description="Client identifier")
    code: Optional[UuidStr] = Field(default=None, description="Authorization code")
    code_verifier: Optional[str] = Field(
        default=None,
        min_length=43,
        max_length=128,
        description="PKCE code verifier"
    )
    refresh_token: Optional[str] = Field(default=None, description="Refresh token")
    scope: Optional[str] = Field(default=None, description="Requested scope")


class TokenResponse(BaseModel):
    """OAuth 2.0 token response."""

    access_token: str = Field(..., description="Access token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")
    refresh_token: str = Field(..., description="Refresh token")
    scope: str = Field(..., description="Granted scope")

"""OAuth 2.0 authorization endpoint schemas."""

from typing import Literal, Optional
from pydantic import BaseModel, Field

from credential_server.oauth.schemas.fields import AbsoluteUri, UuidStr


class AuthorizationRequest(BaseModel):
    """Authorization code request with a PKCE challenge."""

    client_id: UuidStr = Field(..., description="Client identifier")
    redirect_uri: AbsoluteUri = Field(..., description="Registered redirect URI")
    code_challenge: str = Field(
        ...,
        min_length=43,
        max_length=128,
        description="PKCE code challenge"
    )
    code_challenge_method: Literal["S256"] = Field(
        ...,
        description="PKCE code challenge method"
    )
    state: Optional[str] = Field(default=None, description="Opaque client state")
    scope: Optional[str] = Field(default=None, description="Requested scope")

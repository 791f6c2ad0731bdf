"""Dynamic Client Registration (RFC 7591) schemas."""

from typing import List, Optional
from pydantic import BaseModel, Field

from credential_server.oauth.schemas.fields import AbsoluteUri

DEFAULT_CLIENT_NAME = "Unnamed App"


class ClientRegistrationRequest(BaseModel):
    """RFC 7591 client registration request."""

    client_name: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=255,
        description="Human-readable client name"
    )
    redirect_uris: List[AbsoluteUri] = Field(
        ...,
        min_length=1,
        description="List of redirect URIs"
    )


class ClientRegistrationResponse(BaseModel):
    """RFC 7591 client registration response."""

    client_id: str = Field(..., description="Unique client identifier")
    client_secret: str = Field(..., description="Client secret")
    client_name: str = Field(..., description="Client name")
    grant_types: List[str] = Field(
        default=["authorization_code", "refresh_token"],
        description="Allowed grant types"
    )
    response_types: List[str] = Field(
        default=["code"],
        description="Allowed response types"
    )
    token_endpoint_auth_method: str = Field(
        default="none",
        description="Token endpoint authentication method"
    )
    scope: str = Field(default="all", description="Granted scope")
    redirect_uris: List[str] = Field(..., description="Registered redirect URIs")

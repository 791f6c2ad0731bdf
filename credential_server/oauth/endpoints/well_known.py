"""OAuth 2.0 Authorization Server Metadata (RFC 8414) endpoint."""

from fastapi import APIRouter, Depends, Request

from credential_server.config import Settings
from credential_server.oauth.dependencies import get_app_settings

router = APIRouter()


@router.get("/.well-known/oauth-authorization-server")
async def authorization_server_metadata(
    request: Request,
    settings: Settings = Depends(get_app_settings)
):
    """OAuth 2.0 Authorization Server Metadata endpoint (RFC 8414).

    The issuer is the configured SERVER_URI, or the URL the request arrived
    on when none is configured.

    Returns:
        Authorization server metadata
    """
    issuer = (settings.SERVER_URI or str(request.base_url)).rstrip("/")

    return {
        "issuer": issuer,
        "authorization_endpoint": f"{issuer}/oauth/authorize",
        "token_endpoint": f"{issuer}/oauth/token",
        "registration_endpoint": f"{issuer}/oauth/register",
        # client_credentials is advertised but not served by the token endpoint
        "grant_types_supported": ["authorization_code", "client_credentials"],
        "code_challenge_methods_supported": ["S256"],
        "response_types_supported": ["code"]
    }

"""OAuth 2.0 authorization endpoint (authorization code with PKCE)."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from credential_server.oauth.authorization import AuthorizationCodeIssuer
from credential_server.oauth.dependencies import get_issuer
from credential_server.oauth.errors import invalid_request
from credential_server.oauth.schemas.authorize import AuthorizationRequest
from credential_server.oauth.schemas.errors import validation_details

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/oauth/authorize")
def authorize_endpoint(
    request: Request,
    issuer: AuthorizationCodeIssuer = Depends(get_issuer)
):
    """Authorization endpoint.

    Issues a one-time code bound to the PKCE challenge and redirects back to
    the client. Not idempotent: each call replaces the client's previous code.
    """
    try:
        auth_request = AuthorizationRequest.model_validate(dict(request.query_params))
    except ValidationError as e:
        details = validation_details(e)
        logger.debug("Invalid authorization request: %s", details)
        raise invalid_request("Invalid authorization request", details=details)

    redirect_url = issuer.authorize(auth_request)
    return RedirectResponse(url=redirect_url, status_code=302)

"""OAuth 2.0 token endpoint."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from credential_server.oauth.dependencies import get_exchanger
from credential_server.oauth.errors import invalid_request
from credential_server.oauth.exchange import TokenExchanger
from credential_server.oauth.schemas.errors import validation_details
from credential_server.oauth.schemas.token import TokenRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_params(request: Request) -> dict:
    """Token parameters from a form body or, failing that, a JSON body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            raise invalid_request("Invalid token request")
        if not isinstance(data, dict):
            raise invalid_request("Invalid token request")
        return data

    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


@router.post("/oauth/token", response_model=TokenResponse)
async def token_endpoint(
    request: Request,
    exchanger: TokenExchanger = Depends(get_exchanger)
):
    """OAuth 2.0 token endpoint.

    Supports the authorization_code grant (PKCE verifies the caller; there
    is no client authentication) and the refresh_token grant.

    Returns:
        TokenResponse with access_token and refresh_token
    """
    params = await _read_params(request)

    try:
        token_request = TokenRequest.model_validate(params)
    except ValidationError as e:
        details = validation_details(e)
        logger.debug("Invalid token request: %s", details)
        raise invalid_request("Invalid token request", details=details)

    # The store is blocking, keep it off the event loop
    return await run_in_threadpool(exchanger.exchange, token_request)

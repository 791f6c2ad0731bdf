"""Dynamic Client Registration (RFC 7591) endpoint."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from credential_server.oauth.dependencies import get_authenticator, get_registry
from credential_server.oauth.errors import OAuthError, invalid_request
from credential_server.oauth.registry import ClientRegistry
from credential_server.oauth.schemas.dcr import (
    ClientRegistrationRequest,
    ClientRegistrationResponse
)
from credential_server.oauth.schemas.errors import validation_details
from credential_server.oauth.signing import RegistrationAuthenticator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/oauth/register",
    response_model=ClientRegistrationResponse,
    status_code=status.HTTP_201_CREATED
)
async def register_client(
    request: Request,
    registry: ClientRegistry = Depends(get_registry),
    authenticator: Optional[RegistrationAuthenticator] = Depends(get_authenticator)
):
    """RFC 7591 Dynamic Client Registration endpoint.

    When the server is secured the request must carry valid AK/SK signature
    headers computed over the exact body bytes.

    Returns:
        ClientRegistrationResponse with client_id and client_secret

    Raises:
        OAuthError: ``unauthorized`` if the signature check fails,
            ``invalid_request`` if the body is malformed
    """
    body = await request.body()

    if authenticator is not None:
        authenticator.authenticate(request.headers, body)

    try:
        req_data = ClientRegistrationRequest.model_validate_json(body)
    except ValidationError as e:
        details = validation_details(e)
        logger.debug("Invalid registration request: %s", details)
        raise invalid_request("Invalid registration request", details=details)

    try:
        client = await run_in_threadpool(registry.register, req_data)
    except Exception:
        logger.exception("Failed to create client")
        raise OAuthError(
            "server_error",
            "Failed to create client",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return ClientRegistrationResponse(
        client_id=client.client_id,
        client_secret=client.client_secret,
        client_name=client.client_name,
        redirect_uris=client.redirect_uris
    )

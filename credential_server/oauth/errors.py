"""OAuth error type and its JSON rendering."""

from typing import Any, List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from credential_server.oauth.schemas.errors import OAuthErrorResponse


class OAuthError(Exception):
    """An OAuth protocol error surfaced to the caller as ``{error, error_description}``."""

    def __init__(
        self,
        error: str,
        description: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[List[Any]] = None
    ):
        super().__init__(f"{error}: {description}")
        self.error = error
        self.description = description
        self.status_code = status_code
        self.details = details

    def to_response(self) -> OAuthErrorResponse:
        return OAuthErrorResponse(
            error=self.error,
            error_description=self.description,
            details=self.details
        )


def invalid_request(description: str, details: Optional[List[Any]] = None) -> OAuthError:
    return OAuthError("invalid_request", description, details=details)


def invalid_client(description: str) -> OAuthError:
    return OAuthError("invalid_client", description)


def invalid_grant(description: str) -> OAuthError:
    return OAuthError("invalid_grant", description)


def unauthorized(description: str) -> OAuthError:
    return OAuthError("unauthorized", description, status_code=status.HTTP_401_UNAUTHORIZED)


async def oauth_error_handler(request: Request, exc: OAuthError) -> JSONResponse:
    """Render an OAuthError as the standard error body."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(exclude_none=True)
    )

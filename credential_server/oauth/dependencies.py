from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from credential_server.config import Settings
from credential_server.oauth.authorization import AuthorizationCodeIssuer
from credential_server.oauth.exchange import TokenExchanger
from credential_server.oauth.jwt_utils import TokenCodec, TokenVerificationError
from credential_server.oauth.registry import ClientRegistry
from credential_server.oauth.signing import RegistrationAuthenticator

security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_registry(request: Request) -> ClientRegistry:
    return request.app.state.registry


def get_authenticator(request: Request) -> Optional[RegistrationAuthenticator]:
    """The registration authenticator, or None when the server is open."""
    return request.app.state.authenticator


def get_issuer(request: Request) -> AuthorizationCodeIssuer:
    return request.app.state.issuer


def get_exchanger(request: Request) -> TokenExchanger:
    return request.app.state.exchanger


def get_codec(request: Request) -> TokenCodec:
    return request.app.state.codec


async def validate_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    codec: TokenCodec = Depends(get_codec)
) -> dict:
    """FastAPI dependency for bearer token validation on resource routes"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header",
            headers={"WWW-Authenticate": "Bearer"}
        )

    try:
        payload = codec.verify(credentials.credentials)
    except TokenVerificationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": 'Bearer error="invalid_token"'}
        )

    return {"id": payload["sub"], "scope": payload.get("scope")}

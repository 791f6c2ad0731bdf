import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from credential_server.config import Settings, get_settings
from credential_server.oauth.authorization import AuthorizationCodeIssuer
from credential_server.oauth.endpoints.authorize import router as authorize_router
from credential_server.oauth.endpoints.register import router as register_router
from credential_server.oauth.endpoints.token import router as token_router
from credential_server.oauth.endpoints.well_known import router as well_known_router
from credential_server.oauth.errors import OAuthError, oauth_error_handler
from credential_server.oauth.exchange import TokenExchanger
from credential_server.oauth.jwt_utils import TokenCodec
from credential_server.oauth.registry import ClientRegistry
from credential_server.oauth.signing import RegistrationAuthenticator
from credential_server.oauth.storage import ClientStorage, ClientStore

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ClientStore] = None
) -> FastAPI:
    """Build the OAuth server application.

    Args:
        settings: Configuration, read from the environment when omitted
        store: Client store, a ClientStorage over CLIENT_STORAGE_PATH when omitted

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    if store is None:
        storage_path = Path(settings.CLIENT_STORAGE_PATH) if settings.CLIENT_STORAGE_PATH else None
        store = ClientStorage(storage_path)

    registry = ClientRegistry(store)
    codec = TokenCodec(settings.JWT_SECRET)

    app = FastAPI(title="Credential Server")
    app.state.settings = settings
    app.state.registry = registry
    app.state.codec = codec
    app.state.issuer = AuthorizationCodeIssuer(registry)
    app.state.exchanger = TokenExchanger(
        registry,
        codec,
        access_token_ttl=settings.ACCESS_TOKEN_EXPIRE_SECONDS,
        refresh_token_ttl=settings.REFRESH_TOKEN_EXPIRE_SECONDS,
        code_ttl=settings.AUTHORIZATION_CODE_EXPIRE_SECONDS
    )

    if settings.SECURED_SERVER:
        app.state.authenticator = RegistrationAuthenticator(
            settings.OAUTH_REGISTRATION_ACCESS_KEY,
            settings.OAUTH_REGISTRATION_SECRET_KEY
        )
        logger.info("Client registration requires AK/SK signed requests")
    else:
        app.state.authenticator = None
        logger.warning("SECURED_SERVER=false - client registration is open")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"]
    )
    app.add_exception_handler(OAuthError, oauth_error_handler)

    app.include_router(well_known_router)
    app.include_router(register_router)
    app.include_router(authorize_router)
    app.include_router(token_router)

    return app


def main() -> None:
    """Entry point to start the OAuth server."""
    import uvicorn

    settings = get_settings()

    # Configure logging
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger.info("Starting OAuth server on http://%s:%d", settings.HOST, settings.PORT)
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()

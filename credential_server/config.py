from functools import lru_cache
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    JWT_SECRET: str
    SECURED_SERVER: bool = True
    OAUTH_REGISTRATION_ACCESS_KEY: Optional[str] = None
    OAUTH_REGISTRATION_SECRET_KEY: Optional[str] = None
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 3600
    REFRESH_TOKEN_EXPIRE_SECONDS: int = 7 * 24 * 3600
    AUTHORIZATION_CODE_EXPIRE_SECONDS: int = 600
    SERVER_URI: Optional[str] = None
    CLIENT_STORAGE_PATH: Optional[str] = None
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    @model_validator(mode="after")
    def check_secrets(self) -> "Settings":
        """Refuse to start without the secrets the deployment mode needs."""
        if not self.JWT_SECRET:
            raise ValueError("JWT_SECRET must be set")
        if self.SECURED_SERVER and not (
            self.OAUTH_REGISTRATION_ACCESS_KEY and self.OAUTH_REGISTRATION_SECRET_KEY
        ):
            raise ValueError(
                "OAUTH_REGISTRATION_ACCESS_KEY and OAUTH_REGISTRATION_SECRET_KEY "
                "are required when SECURED_SERVER=true"
            )
        return self


@lru_cache()
def get_settings() -> Settings:
    return Settings()

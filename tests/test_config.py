import pytest
from pydantic import ValidationError

from conftest import make_settings


def test_secured_settings():
    settings = make_settings()
    assert settings.SECURED_SERVER is True
    assert settings.ACCESS_TOKEN_EXPIRE_SECONDS == 900


def test_missing_jwt_secret_is_fatal():
    with pytest.raises(ValidationError):
        make_settings(JWT_SECRET="")


@pytest.mark.parametrize("missing", ["OAUTH_REGISTRATION_ACCESS_KEY", "OAUTH_REGISTRATION_SECRET_KEY"])
def test_secured_mode_requires_registration_keys(missing):
    with pytest.raises(ValidationError):
        make_settings(**{missing: None})


def test_open_mode_does_not_need_registration_keys():
    settings = make_settings(
        SECURED_SERVER=False,
        OAUTH_REGISTRATION_ACCESS_KEY=None,
        OAUTH_REGISTRATION_SECRET_KEY=None
    )
    assert settings.SECURED_SERVER is False

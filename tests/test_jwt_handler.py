from datetime import timedelta

import pytest

from shared.config.settings import INSECURE_DEFAULT_SECRET, Settings
from shared.security import create_access_token, verify_access_token


def claims():
    return {"sub": "7", "name": "dave", "role": "Admin"}


def test_round_trip_keeps_claims(settings):
    payload = verify_access_token(create_access_token(claims(), settings), settings)

    assert payload["sub"] == "7"
    assert payload["iss"] == settings.JWT_ISSUER
    assert payload["aud"] == settings.JWT_AUDIENCE


def test_expired_token_is_rejected(settings):
    token = create_access_token(claims(), settings, expires_delta=timedelta(seconds=-5))
    assert verify_access_token(token, settings) is None


def test_token_signed_with_other_secret_is_rejected(settings):
    other = settings.model_copy(update={"JWT_SECRET_KEY": "some-other-secret"})
    token = create_access_token(claims(), other)
    assert verify_access_token(token, settings) is None


def test_token_for_other_audience_is_rejected(settings):
    other = settings.model_copy(update={"JWT_AUDIENCE": "someone-else"})
    token = create_access_token(claims(), other)
    assert verify_access_token(token, settings) is None


def test_garbage_token_is_rejected(settings):
    assert verify_access_token("not.a.jwt", settings) is None


def test_missing_secret_falls_back_with_warning():
    with pytest.warns(UserWarning, match="JWT_SECRET_KEY"):
        settings = Settings(JWT_SECRET_KEY="")
    assert settings.JWT_SECRET_KEY == INSECURE_DEFAULT_SECRET

# tests/unit/infra/test_jwt_token_provider.py
from __future__ import annotations

from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token, create_refresh_token
from pointatlas.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from pointatlas.services._shared.ports import INVALID_ACCESS_TOKEN
from pointatlas.services._shared.principal import Principal


@pytest.fixture()
def provider(app):
    with app.app_context():
        yield JWTTokenProvider()


def test_round_trip_carries_identity_and_roles(provider):
    principal = Principal.of("u-1", email="a@example.com", display_name="Ana", roles=["User"])
    token = provider.issue_access_token(principal)
    verified = provider.validate_access_token(token).unwrap()
    assert verified == principal


def test_expired_token_is_rejected(provider):
    token = create_access_token(identity="u-1", expires_delta=timedelta(seconds=-1))
    result = provider.validate_access_token(token)
    assert result.status_code == 401
    assert result.error == INVALID_ACCESS_TOKEN


def test_tampered_token_is_rejected(provider):
    token = provider.issue_access_token(Principal.of("u-1"))
    head, body, sig = token.split(".")
    forged = ".".join([head, body, sig[::-1]])
    assert provider.validate_access_token(forged).status_code == 401


def test_wrong_audience_is_rejected(app, provider):
    token = create_access_token(identity="u-1", additional_claims={"aud": "someone-else"})
    assert provider.validate_access_token(token).status_code == 401


def test_refresh_type_jwt_is_not_an_access_token(provider):
    token = create_refresh_token(identity="u-1")
    assert provider.validate_access_token(token).status_code == 401


def test_garbage_is_rejected(provider):
    assert provider.validate_access_token("not-a-jwt").status_code == 401


def test_refresh_tokens_are_opaque_and_unique(provider):
    a, b = provider.issue_refresh_token(), provider.issue_refresh_token()
    assert a != b
    assert len(a) >= 80 and "." not in a


def test_token_expires_after_configured_lifetime(app, provider, freeze_time):
    lifetime = app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    with freeze_time("2025-01-01T12:00:00Z") as frozen:
        token = provider.issue_access_token(Principal.of("u-1"))
        assert provider.validate_access_token(token).is_success
        frozen.tick(lifetime + timedelta(seconds=1))
        assert provider.validate_access_token(token).status_code == 401

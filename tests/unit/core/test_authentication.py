"""Unit tests for the external-issuer JWT backend.

Signature verification needs a reachable JWKS endpoint, so the tests
stub ``_jwks_client`` with a locally generated RSA key.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import jwt as pyjwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from rest_framework.exceptions import AuthenticationFailed

from modules.core.authentication import ExternalJWTAuthentication, TokenUser

pytestmark = pytest.mark.unit

ISSUER = "https://issuer.example.com/"
AUDIENCE = "https://catalog.example.com"

EXTERNAL_JWT = {
    "ISSUER": ISSUER,
    "JWKS_URL": f"{ISSUER}.well-known/jwks.json",
    "AUDIENCE": AUDIENCE,
    "ALGORITHM": "RS256",
}


@pytest.fixture(scope="module")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture()
def configured(settings, private_key):
    settings.EXTERNAL_JWT = EXTERNAL_JWT
    jwks = MagicMock()
    jwks.get_signing_key_from_jwt.return_value = SimpleNamespace(key=private_key.public_key())
    with patch("modules.core.authentication._jwks_client", return_value=jwks):
        yield


def _token(private_key, **claims) -> str:
    payload = {"sub": "auth0|42", "iss": ISSUER, "aud": AUDIENCE, "roles": ["ADMIN"]}
    payload.update(claims)
    return pyjwt.encode(payload, private_key, algorithm="RS256")


def _request(header: str | None):
    meta = {} if header is None else {"HTTP_AUTHORIZATION": header}
    return SimpleNamespace(META=meta)


class TestTokenUser:
    def test_roles_and_permissions_are_merged(self):
        user = TokenUser({"sub": "s", "roles": ["ADMIN"], "permissions": ["USER"]})
        assert user.roles == ["ADMIN", "USER"]

    def test_single_string_claim(self):
        assert TokenUser({"sub": "s", "roles": "USER"}).roles == ["USER"]

    def test_no_claims(self):
        user = TokenUser({"sub": "s"})
        assert user.roles == []
        assert user.is_authenticated is True
        assert str(user) == "s"
        assert user.pk == "s"


class TestExternalJWTAuthentication:
    def test_disabled_returns_none(self, settings):
        settings.EXTERNAL_JWT = {}
        assert ExternalJWTAuthentication().authenticate(_request("Bearer abc")) is None

    @pytest.mark.usefixtures("configured")
    def test_missing_header_returns_none(self):
        assert ExternalJWTAuthentication().authenticate(_request(None)) is None

    @pytest.mark.usefixtures("configured")
    def test_foreign_issuer_returns_none(self, private_key):
        token = _token(private_key, iss="https://someone-else.example.com/")
        assert ExternalJWTAuthentication().authenticate(_request(f"Bearer {token}")) is None

    @pytest.mark.usefixtures("configured")
    def test_valid_token(self, private_key):
        token = _token(private_key)

        user, raw = ExternalJWTAuthentication().authenticate(_request(f"Bearer {token}"))

        assert raw == token
        assert user.sub == "auth0|42"
        assert user.roles == ["ADMIN"]

    @pytest.mark.usefixtures("configured")
    def test_wrong_audience_fails_closed(self, private_key):
        token = _token(private_key, aud="https://other-api.example.com")
        with pytest.raises(AuthenticationFailed):
            ExternalJWTAuthentication().authenticate(_request(f"Bearer {token}"))

    @pytest.mark.usefixtures("configured")
    def test_expired_token_fails_closed(self, private_key):
        token = _token(private_key, exp=1)
        with pytest.raises(AuthenticationFailed):
            ExternalJWTAuthentication().authenticate(_request(f"Bearer {token}"))

    def test_authenticate_header(self):
        assert ExternalJWTAuthentication().authenticate_header(None) == 'Bearer realm="api"'

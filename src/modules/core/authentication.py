"""External-issuer JWT authentication backend for Django REST Framework.

Complements SimpleJWT (locally issued tokens) with tokens minted by an
external OpenID provider.  Uses PyJWT with asymmetric verification;
JWKS keys are fetched from the issuer and cached in-memory via
``PyJWKClient``.

Configured through ``settings.EXTERNAL_JWT`` (``ISSUER``, ``JWKS_URL``,
``AUDIENCE``, ``ALGORITHM``).  When it is not configured, or when a
token was minted by somebody else, ``authenticate`` returns ``None`` so
the next backend gets a chance.

Security decisions
------------------
* Fail Closed: a token that claims our issuer but does not verify is
  rejected with 401.
* ``algorithms`` comes from configuration, never from the token header.
* Audience and issuer are always validated.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Optional

import jwt as pyjwt
import structlog
from django.conf import settings
from jwt import PyJWKClient
from jwt.exceptions import PyJWTError
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

logger = structlog.get_logger(__name__)


class TokenUser:
    """Request user for externally issued tokens.

    The issuer is the source of truth: no local ``User`` row is needed.
    Roles are read from the ``roles`` claim and, for providers that
    model them as API permissions, from ``permissions``.
    """

    is_authenticated = True
    is_active = True
    is_anonymous = False

    def __init__(self, payload: Dict[str, Any]) -> None:
        self.payload = payload
        self.sub: str = payload.get("sub", "")
        self.pk = self.id = self.sub
        self.roles: List[str] = _as_list(payload.get("roles")) + _as_list(
            payload.get("permissions")
        )

    def __str__(self) -> str:
        return self.sub


def _as_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    if isinstance(value, str) and value:
        return [value]
    return []


def external_jwt_config() -> Dict[str, str]:
    return getattr(settings, "EXTERNAL_JWT", {}) or {}


def external_jwt_enabled() -> bool:
    config = external_jwt_config()
    return bool(config.get("ISSUER") and config.get("AUDIENCE") and config.get("JWKS_URL"))


@lru_cache(maxsize=4)
def _jwks_client(jwks_url: str) -> PyJWKClient:
    return PyJWKClient(jwks_url, cache_jwk_set=True, lifespan=300)


class ExternalJWTAuthentication(BaseAuthentication):
    """DRF authentication class for Bearer tokens from the external issuer."""

    keyword = "Bearer"

    def authenticate(self, request):
        """Return ``(TokenUser, token)`` or ``None`` (not ours to judge)."""
        header = request.META.get("HTTP_AUTHORIZATION", "")
        if not header or not external_jwt_enabled():
            return None

        token = self._extract_token(header)
        if token is None or self._unverified_issuer(token) != external_jwt_config()["ISSUER"]:
            return None

        user = TokenUser(self._decode_token(token))
        logger.info("jwt_authenticated", sub=user.sub, roles=user.roles)
        return (user, token)

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @classmethod
    def _extract_token(cls, header: str) -> Optional[str]:
        parts = header.split()
        if len(parts) != 2 or parts[0].lower() != cls.keyword.lower():
            return None
        return parts[1]

    @staticmethod
    def _unverified_issuer(token: str) -> Optional[str]:
        try:
            payload = pyjwt.decode(token, options={"verify_signature": False})
        except PyJWTError:
            return None
        return payload.get("iss")

    @staticmethod
    def _decode_token(token: str) -> Dict[str, Any]:
        config = external_jwt_config()
        try:
            signing_key = _jwks_client(config["JWKS_URL"]).get_signing_key_from_jwt(token)
            return pyjwt.decode(
                token,
                signing_key.key,
                algorithms=[config.get("ALGORITHM", "RS256")],
                audience=config["AUDIENCE"],
                issuer=config["ISSUER"],
            )
        except PyJWTError as exc:
            logger.warning("jwt_validation_failed", error=str(exc))
            raise AuthenticationFailed("Token validation failed.") from exc

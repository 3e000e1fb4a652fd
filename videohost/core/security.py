"""Bearer token validation.

Tokens are issued by an external OIDC provider. We only check the signature,
the issuer, the audience and the expiry, then hand the ``sub`` claim to the
service layer. HS* algorithms use ``AUTH_SECRET_KEY``; asymmetric algorithms
resolve the provider's JWKS document once and cache it. A token signed with
an unknown ``kid`` triggers one refetch so rotated keys are picked up,
throttled by ``jwks_refresh_interval``.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union

import httpx
from jose import jwt, JWTError, ExpiredSignatureError
from jose.exceptions import JWTClaimsError
from pydantic import BaseModel, ConfigDict, ValidationError

from videohost.core.config import settings
from videohost.core.errors import UnauthenticatedError

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    sub: Optional[str] = None
    exp: Optional[datetime] = None
    email: Optional[str] = None
    name: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None


class Authenticator:
    """Validate bearer tokens against a configured issuer and audience."""

    def __init__(
        self,
        *,
        issuer: str,
        audience: str,
        algorithms: List[str],
        secret_key: Optional[str] = None,
        jwks_url: Optional[str] = None,
        http_timeout: float = 5.0,
        jwks_refresh_interval: float = 60.0,
    ) -> None:
        self.issuer = issuer
        self.audience = audience
        self.algorithms = algorithms
        self._secret_key = secret_key
        self._jwks_url = jwks_url
        self._http_timeout = http_timeout
        self._jwks_refresh_interval = jwks_refresh_interval
        self._jwks: Optional[Dict[str, Any]] = None
        self._jwks_fetched_at = 0.0

    async def _fetch_jwks(self) -> None:
        if not self._jwks_url:
            raise UnauthenticatedError("No token verification key configured")
        try:
            async with httpx.AsyncClient(timeout=self._http_timeout) as client:
                resp = await client.get(self._jwks_url)
                resp.raise_for_status()
                self._jwks = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Unable to fetch JWKS from %s: %s", self._jwks_url, exc)
            raise UnauthenticatedError("Unable to verify token signature") from exc
        self._jwks_fetched_at = time.monotonic()
        logger.info("Loaded JWKS from %s", self._jwks_url)

    def _knows_kid(self, kid: str) -> bool:
        keys = (self._jwks or {}).get("keys", [])
        return any(k.get("kid") == kid for k in keys if isinstance(k, dict))

    async def _verification_key(
        self, kid: Optional[str] = None
    ) -> Union[str, Dict[str, Any]]:
        if self._secret_key:
            return self._secret_key
        if self._jwks is None:
            await self._fetch_jwks()
        elif kid and not self._knows_kid(kid):
            if time.monotonic() - self._jwks_fetched_at >= self._jwks_refresh_interval:
                logger.info("Signing key %s not in cached JWKS, refetching", kid)
                await self._fetch_jwks()
        return self._jwks

    async def authenticate(self, token: Optional[str]) -> TokenPayload:
        """Return the validated claims of *token* or raise ``UnauthenticatedError``."""

        if not token:
            raise UnauthenticatedError("Not authenticated")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise UnauthenticatedError(f"Could not validate credentials: {exc}")

        key = await self._verification_key(header.get("kid"))
        try:
            payload_dict = jwt.decode(
                token,
                key,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
            )
            token_data = TokenPayload(**payload_dict)
        except ExpiredSignatureError:
            raise UnauthenticatedError("Token has expired")
        except JWTClaimsError as exc:
            raise UnauthenticatedError(f"Invalid token claims: {exc}")
        except (JWTError, ValidationError) as exc:
            raise UnauthenticatedError(f"Could not validate credentials: {exc}")

        if not token_data.sub:
            raise UnauthenticatedError("Invalid token: Subject missing")
        return token_data


_authenticator: Optional[Authenticator] = None


def get_authenticator() -> Authenticator:
    global _authenticator
    if _authenticator is None:
        _authenticator = Authenticator(
            issuer=settings.AUTH_ISSUER,
            audience=settings.AUTH_AUDIENCE,
            algorithms=settings.parsed_auth_algorithms,
            secret_key=settings.AUTH_SECRET_KEY,
            jwks_url=settings.resolved_jwks_url,
            http_timeout=settings.AUTH_HTTP_TIMEOUT,
            jwks_refresh_interval=settings.AUTH_JWKS_REFRESH_INTERVAL,
        )
    return _authenticator


def create_access_token(
    subject: str,
    *,
    secret_key: str,
    issuer: Optional[str] = None,
    audience: Optional[str] = None,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, Any]] = None,
) -> str:
    """Mint a symmetric token, for local development and tests."""

    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=30))
    to_encode: Dict[str, Any] = {
        "sub": subject,
        "iss": issuer or settings.AUTH_ISSUER,
        "aud": audience or settings.AUTH_AUDIENCE,
        "exp": expire,
    }
    if extra_claims:
        to_encode.update(extra_claims)
    return jwt.encode(to_encode, secret_key, algorithm=algorithm, headers=headers)

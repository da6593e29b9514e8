"""
Bearer tokens for the HTTP API.

The local store signs its own HS256 tokens.  Supabase issues its own access
tokens, which are checked against the project's JWT secret or its JWKS.
Either way the ``sub`` claim is the user id a request is scoped to.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import httpx
import jwt
from jwt import PyJWK

from smartstudy.config import settings
from smartstudy.models.auth import User
from smartstudy.utils.errors import AuthError
from smartstudy.utils.logger import get_logger

logger = get_logger(__name__)


def issue_token(user: User, expires_minutes: int = None) -> str:
    """Signed access token for a locally stored user"""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)
    payload = {
        "sub": user.id,
        "email": user.email,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, key: Any, algorithms, audience: str) -> Dict[str, Any]:
    """
    Verify a token and return its claims.

    Raises:
        AuthError: expired, badly signed, wrong audience, or no ``sub`` claim
    """
    try:
        payload = jwt.decode(token, key, algorithms=algorithms, audience=audience)
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError as e:
        raise AuthError(f"Invalid token: {e}")

    if not payload.get("sub"):
        raise AuthError("Invalid token: no sub claim")
    return payload


def verify_local_token(token: str) -> Dict[str, Any]:
    return decode_token(token, settings.JWT_SECRET, [settings.JWT_ALGORITHM], settings.JWT_AUDIENCE)


class SupabaseTokenVerifier:
    """Checks Supabase access tokens, with the JWT secret or the project JWKS"""

    AUDIENCE = "authenticated"

    def __init__(self, jwt_secret: str = None, jwks_url: str = None, transport: httpx.AsyncBaseTransport = None):
        self.jwt_secret = jwt_secret if jwt_secret is not None else settings.SUPABASE_JWT_SECRET
        self.jwks_url = jwks_url or f"{settings.SUPABASE_URL}/auth/v1/.well-known/jwks.json"
        self._transport = transport
        self._jwks: Optional[Dict[str, Any]] = None

    async def _fetch_jwks(self) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT, transport=self._transport) as client:
                resp = await client.get(self.jwks_url)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Could not fetch JWKS from {self.jwks_url}: {e}")
            raise AuthError(f"Authentication failed: {e}")
        logger.info("Fetched JWKS from Supabase")
        return resp.json()

    def _find_key(self, kid: Optional[str]):
        for key_data in (self._jwks or {}).get("keys", []):
            if key_data.get("kid") == kid:
                return PyJWK(key_data).key
        return None

    async def _signing_key(self, token: str):
        kid = jwt.get_unverified_header(token).get("kid")
        if self._jwks is None:
            self._jwks = await self._fetch_jwks()
        key = self._find_key(kid)
        if key is None:
            # Keys rotate; refresh once before giving up
            self._jwks = await self._fetch_jwks()
            key = self._find_key(kid)
        if key is None:
            raise AuthError(f"Invalid token: no signing key for kid={kid}")
        return key

    async def verify(self, token: str) -> Dict[str, Any]:
        if self.jwt_secret:
            return decode_token(token, self.jwt_secret, ["HS256"], self.AUDIENCE)

        try:
            alg = jwt.get_unverified_header(token).get("alg", "HS256")
        except jwt.InvalidTokenError as e:
            raise AuthError(f"Invalid token: {e}")
        key = await self._signing_key(token)
        return decode_token(token, key, [alg], self.AUDIENCE)

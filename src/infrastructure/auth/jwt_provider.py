"""JWT authentication provider implementation.

Supports both Supabase-issued JWTs (ES256 via JWKS) and
locally-created tokens (HS256 for tests).

Supabase JWT payload structure:
    {
        "sub": "user-uuid",
        "email": "user@example.com",
        "role": "authenticated",
        "aud": "authenticated",
        "user_metadata": { "full_name": "Taro Yamada", "user_name": "taro" },
        "exp": 1234567890
    }

``user_metadata`` is passed through untouched; which name keys it carries
depends on the login method (email sign-up, GitHub, Google, ...).
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import httpx
from jose import JWTError, jwt
from jose.backends import ECKey

from core.config import settings
from domain.entities.identity import Identity

logger = logging.getLogger(__name__)

# Module-level JWKS cache (fetched once, reused across requests)
_jwks_cache: dict[str, Any] | None = None


async def _get_jwks_keys() -> dict[str, Any]:
    """Fetch and cache JWKS keys from Supabase."""
    global _jwks_cache
    if _jwks_cache is not None:
        return _jwks_cache

    jwks_url = settings.supabase_jwks_url
    if not jwks_url:
        return {}

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
            jwks_data = response.json()
            _jwks_cache = {
                key_data["kid"]: key_data
                for key_data in jwks_data.get("keys", [])
                if key_data.get("kid")
            }
            logger.info("Fetched %d JWKS keys from Supabase", len(_jwks_cache))
            return _jwks_cache
    except Exception:
        logger.exception("Failed to fetch JWKS from %s", jwks_url)
        return {}


class JWTAuthProvider:
    """JWT-based authentication provider.

    Handles validation of both Supabase-issued (ES256) and
    locally-created (HS256) JWTs.
    """

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> Optional[Identity]:
        """
        Validate a JWT and extract the identity.

        Args:
            token: The JWT to validate

        Returns:
            Identity if valid, None if invalid, expired or missing ``sub``
        """
        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg", self._algorithm)

            if alg == "ES256":
                payload = await self._validate_es256(token, header)
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError:
            return None

        if payload is None:
            return None

        try:
            user_id = UUID(str(payload.get("sub") or ""))
        except ValueError:
            return None

        metadata = payload.get("user_metadata")
        return Identity(
            id=user_id,
            email=payload.get("email") or "",
            metadata=dict(metadata) if isinstance(metadata, dict) else {},
            role=payload.get("role"),
        )

    async def _validate_es256(self, token: str, header: dict) -> Optional[dict]:
        """Validate an ES256-signed JWT using JWKS public keys."""
        kid = header.get("kid")
        if not kid:
            return None

        jwks_keys = await _get_jwks_keys()
        key_data = jwks_keys.get(kid)
        if not key_data:
            # Key not found, refetch once in case the keys were rotated
            global _jwks_cache
            _jwks_cache = None
            jwks_keys = await _get_jwks_keys()
            key_data = jwks_keys.get(kid)
            if not key_data:
                logger.warning("JWKS key not found for kid=%s", kid)
                return None

        ec_key = ECKey(key_data, algorithm="ES256")
        return jwt.decode(
            token,
            ec_key,
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def create_token(self, identity: Identity) -> str:
        """
        Create an HS256 JWT for an identity (local development and tests).

        Args:
            identity: The identity to create a token for

        Returns:
            The generated JWT string
        """
        expire = datetime.utcnow() + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": str(identity.id),
            "email": identity.email,
            "aud": "authenticated",
            "role": identity.role or "authenticated",
            "exp": expire,
            "user_metadata": dict(identity.metadata),
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

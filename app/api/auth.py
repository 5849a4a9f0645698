"""
Authentication: Supabase JWT validation and current user dependency.

Supabase is the identity provider; we only validate its JWT and use the "sub"
claim as the owning user id for every row we store.

Supabase can sign JWTs with:
- RS256/ES256 (asymmetric): verify using public keys from JWKS (recommended).
- HS256 (legacy): verify using SUPABASE_JWT_SECRET.

We support both: read the token header; if alg is RS256/ES256 we use JWKS,
otherwise HS256 with the secret. The token comes from the Authorization header
or, for browser sessions, from the auth cookie.
"""

import logging
from typing import Annotated, Any, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient
from pydantic import BaseModel

from app.config import get_settings
from app.errors import Unauthorized

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None


def _get_jwks_url() -> str:
    """JWKS URL for this Supabase project (public keys for RS256/ES256)."""
    base = (get_settings().supabase_url or "").rstrip("/")
    if not base or "your-project" in base:
        raise ValueError("Set SUPABASE_URL in .env to your project URL (e.g. https://xxx.supabase.co)")
    return f"{base}/auth/v1/.well-known/jwks.json"


def _decode_token_rs256_es256(token: str) -> dict[str, Any]:
    """Verify JWT using Supabase JWKS (RS256 or ES256)."""
    jwks_url = _get_jwks_url()
    client = PyJWKClient(jwks_url)
    signing_key = client.get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["RS256", "ES256"],
        options={"verify_aud": False},
    )


def _decode_token_hs256(token: str, secret: str) -> dict[str, Any]:
    """Verify JWT using shared secret (legacy Supabase)."""
    return jwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        options={"verify_aud": False},
    )


def decode_token(token: str) -> dict[str, Any]:
    """Verify a Supabase access token and return its claims."""
    try:
        unverified = jwt.get_unverified_header(token)
    except jwt.PyJWTError as e:
        logger.warning("Invalid JWT header: %s", e)
        raise Unauthorized("Invalid token format")

    alg = unverified.get("alg")
    if not alg:
        raise Unauthorized("Token missing algorithm")

    if alg in ("RS256", "ES256"):
        try:
            return _decode_token_rs256_es256(token)
        except ValueError as e:
            logger.warning("JWKS URL misconfigured: %s", e)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Set SUPABASE_URL in backend .env to your project URL (e.g. https://xxx.supabase.co).",
            )
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token has expired")
        except jwt.PyJWTError as e:
            logger.warning("JWT verification failed (JWKS): %s", e)
            raise Unauthorized("Invalid token")

    if alg == "HS256":
        secret = get_settings().supabase_jwt_secret
        if not secret:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication not configured (SUPABASE_JWT_SECRET required for HS256).",
            )
        try:
            return _decode_token_hs256(token, secret)
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token has expired")
        except jwt.PyJWTError as e:
            logger.warning("JWT verification failed (HS256): %s", e)
            raise Unauthorized("Invalid token")

    raise Unauthorized(f"Unsupported token algorithm: {alg}")


async def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> CurrentUser:
    """
    Dependency: resolve the caller from the bearer token or the session cookie.
    Raises Unauthorized when neither is present or the token does not verify.
    """
    token = credentials.credentials if credentials else request.cookies.get(get_settings().auth_cookie_name)
    if not token:
        raise Unauthorized("Unauthorized")

    payload = decode_token(token)

    # Standard JWT claims: sub = subject (user id in Supabase)
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Token missing subject")
    return CurrentUser(id=user_id, email=payload.get("email"))

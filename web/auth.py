"""Bearer-token auth: verifies Supabase-style HS256 JWTs with PyJWT."""

import logging
import time

import jwt
from fastapi import Request

from interviewace.errors import AuthError
from web import config

logger = logging.getLogger(__name__)


def _bearer_token(request: Request) -> str:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


def decode_token(token: str) -> dict:
    """Claims of a valid token. Raises AuthError (403) otherwise."""
    if not config.JWT_SECRET:
        logger.error("JWT secret not configured (set SUPABASE_JWT_SECRET or JWT_SECRET)")
        raise AuthError("JWT secret not configured", status_code=403, public_message="Invalid token")
    try:
        claims = jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=config.JWT_ALGORITHMS,
            options={"verify_aud": False},
        )
    except jwt.PyJWTError as e:
        logger.warning("Rejected token: %s", e)
        raise AuthError(str(e), status_code=403, public_message="Invalid token") from e
    if not claims.get("sub"):
        raise AuthError("Token has no subject", status_code=403, public_message="Invalid token payload")
    return claims


def _user_from_claims(request: Request, claims: dict) -> dict:
    user_id = str(claims["sub"])
    profile = request.app.state.store.get_profile(user_id)
    return {
        "id": user_id,
        "email": claims.get("email") or profile.get("email") or "",
        "is_premium": bool(profile.get("is_premium")),
    }


async def get_current_user(request: Request) -> dict:
    """FastAPI dependency: the authenticated caller, or 401/403."""
    token = _bearer_token(request)
    if not token:
        raise AuthError("No bearer token", status_code=401, public_message="Access token required")
    return _user_from_claims(request, decode_token(token))


async def get_optional_user(request: Request):
    """Like ``get_current_user`` but None for anonymous callers; a bad token still fails."""
    token = _bearer_token(request)
    if not token:
        return None
    return _user_from_claims(request, decode_token(token))


def create_token(user_id: str, email: str = "", expires_in: int = 3600) -> str:
    """HS256 token for local development and tests."""
    now = int(time.time())
    payload = {"sub": user_id, "email": email, "iat": now, "exp": now + expires_in, "aud": "authenticated"}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHMS[0])

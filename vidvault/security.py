"""
Identity Resolution

Turns the bearer token or session cookie on a request into an Identity.
The access gate only needs a definite yes/no, so bad tokens resolve to
"no identity" instead of raising.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt  # PyJWT
from fastapi import HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param

from vidvault.config import get_settings

logger = logging.getLogger(__name__)

TOKEN_ISSUER = "vidvault"


@dataclass(frozen=True)
class Identity:
    """Verified caller"""
    user_id: str


def create_access_token(sub: str, expires_minutes: Optional[int] = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    exp_mins = expires_minutes or settings.jwt_expires_minutes
    payload = {
        "sub": sub,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=exp_mins)).timestamp()),
        "iss": TOKEN_ISSUER,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg)


def decode_identity(token: str) -> Optional[Identity]:
    """Decode a token into an Identity, or None when it is invalid or expired"""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_alg],
            issuer=TOKEN_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired token")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"Rejected invalid token: {e}")
        return None

    sub = payload.get("sub")
    if not sub:
        return None
    return Identity(user_id=str(sub))


def resolve_identity(request: Request) -> Optional[Identity]:
    """
    Resolve the caller from the Authorization header, then the auth cookie

    Returns:
        Identity when a valid token is present, otherwise None
    """
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, token = get_authorization_scheme_param(authorization)
        if scheme.lower() == "bearer" and token:
            return decode_identity(token)

    cookie_token = request.cookies.get(get_settings().auth_cookie_name)
    if cookie_token:
        return decode_identity(cookie_token)

    return None


def require_identity(request: Request) -> Identity:
    """
    FastAPI dependency for handlers that need the caller's identity

    The access gate stores the resolved identity on request.state; handlers
    mounted without the gate fall back to resolving it here.
    """
    identity = getattr(request.state, "identity", None) or resolve_identity(request)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return identity

"""Request authentication for mutating endpoints.

Identities are issued elsewhere; this module only checks what arrives with
a request: a shared API key for service-to-service callers, or a bearer JWT
from the identity provider for operators and pickers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import jwt
from fastapi import HTTPException, status

from stockpick.config import Settings, get_settings


@dataclass(frozen=True)
class Principal:
    auth_type: str
    subject: Optional[str] = None
    claims: dict = field(default_factory=dict)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def configured_api_keys(settings: Settings) -> frozenset:
    if not settings.API_KEYS:
        return frozenset()
    return frozenset(key.strip() for key in settings.API_KEYS.split(",") if key.strip())


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def verify_token(token: str, settings: Settings) -> dict:
    if not settings.JWT_SECRET:
        raise _unauthorized("Bearer tokens are not accepted by this deployment")
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options={"verify_aud": bool(settings.JWT_AUDIENCE)},
        )
    except jwt.ExpiredSignatureError as exc:
        raise _unauthorized("Token expired") from exc
    except jwt.PyJWTError as exc:
        raise _unauthorized("Invalid token") from exc


def authenticate_request(
    api_key: Optional[str],
    authorization: Optional[str],
    *,
    require_auth: bool = False,
) -> Optional[Principal]:
    """Resolve the caller, or return None when the deployment runs open.

    A deployment is open when it has neither API keys nor a JWT secret;
    ``JWT_REQUIRED`` turns API keys off and insists on a valid token.
    """
    settings = get_settings()
    keys = configured_api_keys(settings)

    if api_key and api_key in keys and not settings.JWT_REQUIRED:
        return Principal(auth_type="api_key")

    token = bearer_token(authorization)
    if token and (settings.JWT_SECRET or settings.JWT_REQUIRED):
        claims = verify_token(token, settings)
        return Principal(auth_type="jwt", subject=claims.get("sub"), claims=claims)

    secured = bool(keys or settings.JWT_SECRET or settings.JWT_REQUIRED)
    if secured and (require_auth or settings.JWT_REQUIRED):
        raise _unauthorized("Not authenticated")
    return None


__all__ = ["Principal", "authenticate_request", "bearer_token", "configured_api_keys", "verify_token"]

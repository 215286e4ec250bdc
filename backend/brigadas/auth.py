"""Caller identity taken from an already issued bearer token."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import jwt
from fastapi import Header

from .errors import AuthError

# purpose: expose the verified caller as {id, email}; issuing tokens belongs to the auth service
# status: active

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    id: str
    email: str


def _algorithms() -> list[str]:
    return [alg.strip() for alg in os.getenv("AUTH_JWT_ALGORITHMS", "HS256").split(",") if alg.strip()]


def decode_token(token: str) -> Identity:
    secret = os.getenv("AUTH_JWT_SECRET")
    if not secret:
        logger.error("AUTH_JWT_SECRET is not set; rejecting bearer token")
        raise AuthError("Verificación de token no configurada", status_code=401)
    audience = os.getenv("AUTH_JWT_AUDIENCE", "authenticated") or None
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=_algorithms(),
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except jwt.InvalidSignatureError:
        raise AuthError("Token inválido o no autorizado", status_code=403) from None
    except jwt.DecodeError:
        raise AuthError("Token malformado", status_code=401) from None
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise AuthError("Token inválido o no autorizado", status_code=403) from None

    email = payload.get("email")
    subject = payload.get("sub")
    if not email:
        raise AuthError("Email no encontrado en token", status_code=401)
    if not subject:
        raise AuthError("Identificador no encontrado en token", status_code=401)
    return Identity(id=str(subject), email=email)


async def get_current_user(authorization: str | None = Header(default=None)) -> Identity:
    if not authorization:
        raise AuthError("Token requerido", status_code=401)
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Token requerido", status_code=401)
    return decode_token(token.strip())

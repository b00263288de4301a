"""
jwt.py: Caller identity for the HTTP transport.

A caller proves its address with a bearer token minted by
scripts/issue_token.py. The engine trusts the ``sub`` claim as the caller
address; tokens from other issuers are rejected even when the key matches.
"""

import os
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import HTTPException, Request, status

SECRET_KEY = os.environ.get("SECRET_KEY")
if not SECRET_KEY:
    raise ValueError("A SECRET_KEY environment variable is required.")
ALGORITHM = os.environ.get("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
TOKEN_ISSUER = os.environ.get("TREASURY_NAME", "treasury")

_REQUIRED_CLAIMS = ["sub", "exp", "iat", "iss"]


def create_access_token(address: str, expires_in: timedelta | None = None) -> str:
    if not address:
        raise ValueError("Cannot issue a token for an empty address")
    issued = datetime.now(timezone.utc)
    lifetime = expires_in or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": address, "iss": TOKEN_ISSUER, "iat": issued, "exp": issued + lifetime}
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> str:
    """Return the caller address carried by ``token``, or raise 401."""
    try:
        claims = jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            issuer=TOKEN_ISSUER,
            options={"require": _REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError as exc:
        raise _unauthorized(f"Invalid token: {exc}")

    address = claims["sub"]
    if not isinstance(address, str) or not address.strip():
        raise _unauthorized("Token subject is not an address")
    return address


async def get_caller(request: Request) -> str:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise _unauthorized("Missing bearer token")
    return decode_access_token(token.strip())

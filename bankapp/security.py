"""
Security utilities: JWT access tokens.

Users are provisioned by an external identity system; this service never
sees a password. It only verifies the signed bearer token that comes with
each request and maps its subject to a stored User.

JWT TOKENS (JSON Web Tokens)
  - The token carries the user's id in the standard "sub" claim
  - It is signed with SECRET_KEY using HS256 (HMAC-SHA256)
  - Tokens expire after ACCESS_TOKEN_EXPIRE_MINUTES (default: 30 min)
  - The server is stateless: no session storage needed

Enterprise note:
  In production the signing key would come from a secrets manager
  (AWS KMS, HashiCorp Vault) rather than an environment variable.
"""

from datetime import datetime, timedelta, timezone

from jose import jwt

from bankapp.config import settings


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Dictionary of claims to encode (must include "sub").
        expires_delta: Optional custom expiration time. Defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES from settings.

    Returns:
        An encoded JWT string.
    """
    to_encode = data.copy()
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": datetime.now(timezone.utc) + lifetime})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT access token.

    Raises:
        JWTError: If the token is expired, tampered with, or invalid.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])

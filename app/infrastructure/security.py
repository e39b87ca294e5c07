"""Helpers to validate Supabase access tokens."""

from __future__ import annotations

from jose import JWTError, jwt

from app.config import get_settings


def decode_access_token(token: str) -> dict:
    """Return the claims of a Supabase access token or raise ``ValueError``."""

    settings = get_settings()
    if not settings.supabase_jwt_secret:
        raise ValueError("Supabase JWT secret is not configured")
    try:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience=settings.supabase_jwt_audience,
        )
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def resolve_identity(token: str) -> str:
    """Return the user id (``sub`` claim) carried by ``token``."""

    claims = decode_access_token(token)
    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        raise ValueError("Access token does not identify a user")
    return subject


__all__ = ["decode_access_token", "resolve_identity"]

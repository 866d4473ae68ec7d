"""Validation of access tokens minted by the external identity provider."""

from jose import JWTError, jwt

from app.config import settings


def decode_access_token(token: str) -> dict:
    """Decode and validate an access token. Raises JWTError on failure."""
    options = {"verify_aud": bool(settings.jwt_audience)}
    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience or None,
        options=options,
    )
    if not payload.get("sub"):
        raise JWTError("Token has no subject")
    return payload

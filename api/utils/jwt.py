from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, status
from jose import JWTError
from jose.jwt import decode, encode
from pydantic import ValidationError

from api.config import get_settings
from api.schemas.auth_schemas import AuthTokenPayload
from api.utils.logger import configure_logging

logger = configure_logging()


def create_access_token(sub: str, expires_in: timedelta = timedelta(minutes=30), **claims) -> str:
    """Issue a token signed with the configured secret. Used by local tooling and tests."""
    settings = get_settings()
    payload = {"sub": sub, "exp": datetime.now(timezone.utc) + expires_in, **claims}
    return encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: Optional[str]) -> AuthTokenPayload:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    settings = get_settings()
    try:
        payload = decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return AuthTokenPayload(**payload)
    except (JWTError, ValidationError) as e:
        logger.warning("token rejected: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

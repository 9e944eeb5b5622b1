"""
Request identity. Sign-in happens at the external identity provider; we only
verify the token it issued, from the access_token cookie or a Bearer header.
"""

from typing import Optional

from fastapi import Cookie, Header, HTTPException, status

from api.utils.jwt import verify_token


def _token_from_request(access_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return access_token or None


def get_current_user_id(
    access_token: Optional[str] = Cookie(None),
    authorization: Optional[str] = Header(None),
) -> str:
    payload = verify_token(_token_from_request(access_token, authorization))
    if not payload.sub or not payload.sub.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return payload.sub


def get_optional_user_id(
    access_token: Optional[str] = Cookie(None),
    authorization: Optional[str] = Header(None),
) -> Optional[str]:
    """User id when a valid token is present; None for anonymous callers."""
    token = _token_from_request(access_token, authorization)
    if not token:
        return None
    try:
        return get_current_user_id(access_token=token, authorization=None)
    except HTTPException:
        return None

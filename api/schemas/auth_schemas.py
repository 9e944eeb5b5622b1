from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class AuthTokenPayload(BaseModel):
    """Claims we read from identity-provider tokens; sub is the user id."""
    sub: str
    exp: Optional[datetime] = None
    email: Optional[str] = None

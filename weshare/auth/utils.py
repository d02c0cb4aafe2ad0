from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt

from weshare.config import settings
from weshare.exceptions import Unauthorized

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def verify_token(token: str) -> dict:
    """Decode a token and return its payload with the resolved user id"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Session expired, please log in again")
    except jwt.PyJWTError:
        raise Unauthorized("Could not validate credentials")

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise Unauthorized("Could not validate credentials")

    payload["user_id"] = int(subject)
    return payload

import logging
from fastapi import HTTPException, Depends
from uuid import UUID
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from videodiary.core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

# Initialize logger and security tools
logger = logging.getLogger(__name__)
bearer = HTTPBearer(auto_error=False)


def create_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issues a signed access token whose subject is the user's id.

    Args:
        user_id (UUID): Owner identity.
        expires_delta (timedelta, optional): Lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES.

    Returns:
        str: Encoded JWT.
    """
    now = datetime.now(timezone.utc)
    if not expires_delta:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": now.timestamp(),
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Decodes and validates a JWT token.

    Args:
        token (str): JWT string.

    Returns:
        dict: Decoded payload.

    Raises:
        HTTPException: If token is invalid or expired.
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM], options={"verify_aud": False})
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired authentication token")


def get_current_user_id(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> UUID:
    """
    Extracts the user ID from the bearer token.

    Args:
        creds (HTTPAuthorizationCredentials): Bearer token.

    Returns:
        UUID: User's UUID.

    Raises:
        HTTPException: If the token is missing, invalid or lacks a usable subject.
    """
    if creds is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    payload = decode_token(creds.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token missing subject field")
    try:
        return UUID(user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid user ID in token")

"""
Security utilities for password hashing, JWT handling and the identity guard.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import AuthenticationException
from core.logging import security_logger
from db_config import get_db
from models.models import User

logger = security_logger

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)

# auto_error=False so a missing header yields our 401 instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against its hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.error("Password verification error", error=str(e))
        return False


def get_password_hash(password: str) -> str:
    """Hash a plain password."""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: The claims to encode; `sub` must identify the user
        expires_delta: Optional custom expiration time

    Returns:
        str: The encoded JWT token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "iat": datetime.now(timezone.utc)})
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    logger.info("Access token created", subject=data.get("sub"), expires_at=expire.isoformat())
    return encoded_jwt


def verify_token(token: str) -> Optional[dict]:
    """
    Verify and decode a JWT token.

    Returns:
        dict: The decoded payload if the signature and expiry are valid, None otherwise
    """
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning("Token verification failed", error=str(e))
        return None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the bearer token on the request to a user record.

    Raises:
        AuthenticationException: header missing or malformed, token invalid or
            expired, or the referenced user no longer exists
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationException("Not authorized, no token")

    payload = verify_token(credentials.credentials)
    if payload is None:
        raise AuthenticationException("Not authorized, token failed")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        logger.warning("Token missing user claim")
        raise AuthenticationException("Not authorized, token failed")

    user = db.get(User, user_id)
    if user is None:
        logger.warning("User not found for token", user_id=user_id)
        raise AuthenticationException("Not authorized, user not found")

    return user

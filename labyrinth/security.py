"""
Security utilities for the editing gate.

Provides password hashing and the signed session cookie that records
whether a visitor has logged in.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from .config import Settings
from .logging_config import get_logger

logger = get_logger(__name__)

SESSION_TOKEN_TYPE = "session"


@dataclass(frozen=True)
class Session:
    """Typed view of the session cookie."""

    authenticated: bool = False


ANONYMOUS = Session(authenticated=False)


# ==================== PASSWORD HASHING ====================


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password
        rounds: bcrypt cost factor

    Returns:
        Hashed password string
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a password against its hash.

    Returns False when no hash is configured or the hash is malformed.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.error(f"Password verification failed: {e}")
        return False


# ==================== SESSION TOKENS ====================


def create_session_token(session: Session, settings: Settings) -> str:
    """
    Encode a session as a signed JWT for the session cookie.

    Args:
        session: Session to encode
        settings: Settings holding the signing key and lifetime

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    payload = {
        "type": SESSION_TOKEN_TYPE,
        "authenticated": session.authenticated,
        "iat": now,
        "exp": now + timedelta(minutes=settings.SESSION_EXPIRE_MINUTES),
    }
    return jwt.encode(
        payload, settings.SESSION_SECRET_KEY, algorithm=settings.SESSION_ALGORITHM
    )


def decode_session_token(token: Optional[str], settings: Settings) -> Session:
    """
    Decode a session cookie.

    Any missing, expired, tampered or malformed token reads as an
    anonymous session.
    """
    if not token:
        return ANONYMOUS

    try:
        payload = jwt.decode(
            token, settings.SESSION_SECRET_KEY, algorithms=[settings.SESSION_ALGORITHM]
        )
    except ExpiredSignatureError:
        logger.debug("Session token expired")
        return ANONYMOUS
    except InvalidTokenError as e:
        logger.warning(f"Invalid session token: {e}")
        return ANONYMOUS

    if payload.get("type") != SESSION_TOKEN_TYPE:
        logger.warning("Invalid session token type")
        return ANONYMOUS

    return Session(authenticated=payload.get("authenticated") is True)

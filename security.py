import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from schemas import SessionUser

# Environment
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-key")
JWT_ALG = "HS256"
SESSION_MAX_AGE = int(os.getenv("SESSION_MAX_AGE", str(24 * 60 * 60)))
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session_token")
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # stored value is not a recognizable hash
        return False


def create_session_token(user: SessionUser, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a session token carrying the identity and role of ``user``."""
    if expires_delta is None:
        expires_delta = timedelta(seconds=SESSION_MAX_AGE)
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "is_active": user.is_active,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_session_token(token: str) -> SessionUser:
    """
    Verify ``token`` and rebuild the session identity.

    Raises ``jwt.ExpiredSignatureError`` for expired tokens and
    ``jwt.InvalidTokenError`` for anything else that fails verification,
    including a payload that does not describe a session.
    """
    payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
    try:
        return SessionUser(
            id=payload["sub"],
            email=payload["email"],
            name=payload["name"],
            role=payload["role"],
            is_active=payload.get("is_active", True),
        )
    except (KeyError, ValueError) as exc:
        raise jwt.InvalidTokenError("Malformed session payload") from exc

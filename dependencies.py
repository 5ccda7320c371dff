import logging
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer

from database import Database, parse_object_id
from schemas import SessionUser
from security import SESSION_COOKIE_NAME, decode_session_token

logger = logging.getLogger(__name__)

# auto_error is off so the session cookie can be used instead of the header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_db(request: Request) -> Database:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(status_code=500, detail="Database not available")
    return database


def get_session(request: Request, token: Optional[str] = Depends(oauth2_scheme)) -> SessionUser:
    token = token or request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        session = decode_session_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Session expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if not session.is_active:
        raise HTTPException(status_code=401, detail="Account is disabled")
    return session


def require_superadmin(session: SessionUser = Depends(get_session)) -> SessionUser:
    if session.role != "superadmin":
        logger.info("Denied %s (%s) access to user management", session.email, session.role)
        raise HTTPException(status_code=403, detail="Access denied")
    return session


def object_id_or_400(value: str, label: str):
    oid = parse_object_id(value)
    if oid is None:
        raise HTTPException(status_code=400, detail=f"Invalid {label} id")
    return oid

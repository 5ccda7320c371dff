import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from database import Database
from dependencies import get_db, get_session
from schemas import LoginRequest, SessionUser, TokenResponse
from security import SESSION_COOKIE_NAME, SESSION_MAX_AGE, create_session_token, verify_password

logger = logging.getLogger(__name__)

SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() in ("1", "true", "yes")

router = APIRouter(prefix="/api/auth", tags=["auth"])


def authenticate(db: Database, email: str, password: str) -> Optional[SessionUser]:
    """
    Check ``email``/``password`` against the user collection.

    Returns the session identity, or None when the account is unknown,
    disabled, or the password does not match. ``last_login`` is only
    written on success.
    """
    user = db["user"].find_one({"email": email.strip().lower()})
    if not user:
        logger.info("Login failed for %s: unknown account", email)
        return None
    if not user.get("is_active", True):
        logger.info("Login failed for %s: account is disabled", email)
        return None
    if not verify_password(password, user.get("password_hash")):
        logger.info("Login failed for %s: wrong password", email)
        return None

    db["user"].update_one(
        {"_id": user["_id"]},
        {"$set": {"last_login": datetime.now(timezone.utc)}},
    )
    return SessionUser(
        id=str(user["_id"]),
        email=user["email"],
        name=user.get("name", ""),
        role=user.get("role", "user"),
        is_active=user.get("is_active", True),
    )


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, response: Response, db: Database = Depends(get_db)):
    session = authenticate(db, payload.email, payload.password)
    if session is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_session_token(session)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )
    logger.info("%s (%s) logged in", session.email, session.role)
    return TokenResponse(access_token=token, user=session)


@router.get("/session", response_model=SessionUser)
def current_session(session: SessionUser = Depends(get_session)):
    return session


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"message": "Logged out"}

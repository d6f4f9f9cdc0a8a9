"""
Password hashing and session identity.

The session cookie is signed by Starlette's SessionMiddleware and only holds
the user id. Handlers never read it directly: they take the authenticated
user from the `get_current_user` dependency.
"""

import logging

import bcrypt
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

import storage
from config import get_settings
from db import get_db

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # malformed hash or over-long password
        return False


def authenticate(db: Session, email: str, password: str):
    user = storage.get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password):
        logger.info("Failed login for %s", email)
        return None
    return user


def login_session(request: Request, user) -> None:
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    logger.info("User %s logged in", user.id)


def logout_session(request: Request) -> None:
    user_id = request.session.get(SESSION_USER_KEY)
    request.session.clear()
    if user_id:
        logger.info("User %s logged out", user_id)


def get_optional_user(request: Request, db: Session = Depends(get_db)):
    """The logged-in user, or None. Stale sessions (deleted user) are cleared."""
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return None
    user = storage.get_user(db, user_id)
    if user is None:
        request.session.clear()
    return user


def get_current_user(user=Depends(get_optional_user)):
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user

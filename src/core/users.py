from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.auth import AuthService
from src.core.errors import UsernameTakenError, ValidationError
from src.db.models import User


log = logging.getLogger(__name__)


def get_user_by_username(session: Session, username: str) -> Optional[User]:
    return session.query(User).filter(User.username == username).one_or_none()


def signup(session: Session, auth: AuthService, *, username: str, password: str) -> User:
    name = (username or "").strip()
    if not name or not password:
        raise ValidationError("Username and password are required")
    if get_user_by_username(session, name) is not None:
        raise UsernameTakenError(name)

    user = User(username=name, password=auth.hash_password(password))
    session.add(user)
    try:
        session.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent signup for the same name.
        session.rollback()
        raise UsernameTakenError(name) from e
    log.info("created user id=%s", user.id)
    return user


def authenticate(session: Session, auth: AuthService, *, username: str, password: str) -> Optional[User]:
    """Return the user when the credentials match; None for unknown user or wrong password alike."""
    user = get_user_by_username(session, (username or "").strip())
    if user is None:
        auth.verify_password(password, auth.dummy_hash())
        return None
    if not auth.verify_password(password, user.password):
        return None
    return user

from __future__ import annotations

import logging

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.orm import Session

from src.app.db import db_session
from src.core.auth import AuthService
from src.core.config import AppConfig
from src.core.types import CurrentUser
from src.db.models import User


log = logging.getLogger(__name__)

LOGIN_URL = "/login"


class LoginRequired(Exception):
    """Raised by `require_user`; the app turns it into a redirect to the login page."""

    def __init__(self, *, clear_cookie: bool = False) -> None:
        super().__init__("login required")
        self.clear_cookie = clear_cookie


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_auth(request: Request) -> AuthService:
    return request.app.state.auth


def require_user(
    request: Request,
    session: Session = Depends(db_session),
    config: AppConfig = Depends(get_config),
    auth: AuthService = Depends(get_auth),
) -> CurrentUser:
    token = request.cookies.get(config.cookie_name)
    if not token:
        raise LoginRequired()

    user_id = auth.verify_token(token)
    if user_id is None:
        log.debug("rejected session token for %s", request.url.path)
        raise LoginRequired(clear_cookie=True)

    user = session.get(User, user_id)
    if user is None:
        raise LoginRequired(clear_cookie=True)
    return CurrentUser(id=user.id, username=user.username)


def set_session_cookie(response: Response, config: AppConfig, auth: AuthService, token: str) -> None:
    response.set_cookie(
        key=config.cookie_name,
        value=token,
        max_age=int(auth.token_ttl.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=config.cookie_secure,
    )


def clear_session_cookie(response: Response, config: AppConfig) -> None:
    response.delete_cookie(key=config.cookie_name, httponly=True, samesite="lax", secure=config.cookie_secure)


def login_redirect(config: AppConfig, *, clear_cookie: bool) -> RedirectResponse:
    response = RedirectResponse(url=LOGIN_URL, status_code=303)
    if clear_cookie:
        clear_session_cookie(response, config)
    return response

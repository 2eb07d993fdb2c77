from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from src.app.auth import LOGIN_URL, clear_session_cookie, get_auth, get_config, set_session_cookie
from src.app.db import db_session
from src.core.auth import AuthService
from src.core.config import AppConfig
from src.core.errors import UsernameTakenError, ValidationError
from src.core.users import authenticate, signup

log = logging.getLogger(__name__)

router = APIRouter(tags=["accounts"])

INVALID_CREDENTIALS = "Invalid credentials"


def _render(request: Request, name: str, *, title: str, error: str | None = None, status_code: int = 200):
    from src.app.main import templates

    return templates.TemplateResponse(
        request,
        name,
        {"user": None, "title": title, "error": error},
        status_code=status_code,
    )


@router.get("/signup")
def signup_form(request: Request):
    return _render(request, "signup.html", title="Sign Up")


@router.post("/signup")
def signup_submit(
    request: Request,
    session: Session = Depends(db_session),
    auth: AuthService = Depends(get_auth),
    username: str = Form(default=""),
    password: str = Form(default=""),
):
    try:
        signup(session, auth, username=username, password=password)
    except ValidationError as e:
        return _render(request, "signup.html", title="Sign Up", error=str(e), status_code=400)
    except UsernameTakenError:
        return _render(request, "signup.html", title="Sign Up", error="Username already exists", status_code=400)
    session.commit()
    return RedirectResponse(url=LOGIN_URL, status_code=303)


@router.get("/login")
def login_form(request: Request):
    return _render(request, "login.html", title="Login")


@router.post("/login")
def login_submit(
    request: Request,
    session: Session = Depends(db_session),
    config: AppConfig = Depends(get_config),
    auth: AuthService = Depends(get_auth),
    username: str = Form(default=""),
    password: str = Form(default=""),
):
    user = authenticate(session, auth, username=username, password=password)
    if user is None:
        log.info("failed login attempt")
        return _render(request, "login.html", title="Login", error=INVALID_CREDENTIALS, status_code=401)

    response = RedirectResponse(url="/", status_code=303)
    set_session_cookie(response, config, auth, auth.issue_token(user.id))
    return response


@router.post("/logout")
def logout(config: AppConfig = Depends(get_config)):
    response = RedirectResponse(url=LOGIN_URL, status_code=303)
    clear_session_cookie(response, config)
    return response

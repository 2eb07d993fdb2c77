from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError

from src.app.auth import LoginRequired, login_redirect
from src.app.routes.accounts import router as accounts_router
from src.app.routes.categories import api_router as categories_api_router
from src.app.routes.categories import router as categories_router
from src.app.routes.dashboard import router as dashboard_router
from src.app.routes.expenses import api_router as expenses_api_router
from src.app.routes.expenses import router as expenses_router
from src.core.auth import AuthService
from src.core.config import AppConfig, load_config
from src.db.init_db import init_db
from src.db.session import build_engine, build_session_factory
from src.utils.money import format_usd
from src.utils.time import format_date


log = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.filters["usd"] = format_usd
templates.env.filters["iso_date"] = format_date


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    if config is None:
        config = load_config()
    app = FastAPI(title="Expense Tracker", version="0.1.0")

    engine = build_engine(config)
    app.state.config = config
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.auth = AuthService(config)

    static_dir = BASE_DIR / "static"
    css_path = static_dir / "app.css"
    try:
        templates.env.globals["static_version"] = str(int(css_path.stat().st_mtime))
    except OSError:
        templates.env.globals["static_version"] = "0"
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    @app.on_event("startup")
    def _startup() -> None:
        init_db(engine, app.state.session_factory, config)

    @app.exception_handler(LoginRequired)
    def _login_required(request: Request, exc: LoginRequired):
        return login_redirect(config, clear_cookie=exc.clear_cookie)

    @app.exception_handler(SQLAlchemyError)
    def _store_error(request: Request, exc: SQLAlchemyError):
        log.exception("database error on %s %s", request.method, request.url.path)
        if request.url.path.startswith("/api/"):
            return JSONResponse(status_code=500, content={"error": "Internal server error"})
        return PlainTextResponse("Internal server error", status_code=500)

    app.include_router(accounts_router)
    app.include_router(dashboard_router)
    app.include_router(categories_router)
    app.include_router(expenses_router)
    app.include_router(categories_api_router)
    app.include_router(expenses_api_router)
    return app

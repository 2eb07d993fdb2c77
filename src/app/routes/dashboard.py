from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from src.app.auth import require_user
from src.app.db import db_session
from src.core.expenses import list_expenses
from src.core.types import CurrentUser

router = APIRouter()


@router.get("/")
def dashboard(
    request: Request,
    session: Session = Depends(db_session),
    user: CurrentUser = Depends(require_user),
):
    listing = list_expenses(session, user)

    from src.app.main import templates

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "user": user,
            "title": "Dashboard",
            "expenses": listing.expenses,
            "total": listing.total,
        },
    )

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from src.app.auth import require_user
from src.app.db import db_session
from src.core.categories import category_to_dict, list_categories
from src.core.types import CurrentUser

router = APIRouter(prefix="/categories", tags=["categories"])
api_router = APIRouter(prefix="/api/categories", tags=["api"])


@router.get("")
def categories_page(
    request: Request,
    session: Session = Depends(db_session),
    user: CurrentUser = Depends(require_user),
):
    from src.app.main import templates

    return templates.TemplateResponse(
        request,
        "categories.html",
        {"user": user, "title": "Categories", "categories": list_categories(session)},
    )


@api_router.get("")
def categories_api(
    session: Session = Depends(db_session),
    user: CurrentUser = Depends(require_user),
):
    return [category_to_dict(c) for c in list_categories(session)]

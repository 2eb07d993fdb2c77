from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.app.auth import require_user
from src.app.db import db_session
from src.core.categories import list_categories
from src.core.errors import ForbiddenError, NotFoundError, ValidationError
from src.core.expenses import (
    create_expense,
    delete_owned_expense,
    expense_to_dict,
    get_owned_expense,
    list_expenses,
    update_expense,
)
from src.core.types import CurrentUser

log = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])
api_router = APIRouter(prefix="/api/expenses", tags=["api"])

CREATE_FAILED = "Error creating expense"


def _form_page(request: Request, session: Session, user: CurrentUser, *, error: str | None = None, status_code: int = 200):
    from src.app.main import templates

    return templates.TemplateResponse(
        request,
        "expense_form.html",
        {
            "user": user,
            "title": "Add Expense",
            "expense": None,
            "categories": list_categories(session),
            "action": "/expenses",
            "error": error,
        },
        status_code=status_code,
    )


def _api_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("")
def expenses_list(
    request: Request,
    session: Session = Depends(db_session),
    user: CurrentUser = Depends(require_user),
):
    listing = list_expenses(session, user)
    from src.app.main import templates

    return templates.TemplateResponse(
        request,
        "expenses.html",
        {"user": user, "title": "Expenses", "expenses": listing.expenses, "total": listing.total},
    )


@router.get("/new")
def expenses_new(
    request: Request,
    session: Session = Depends(db_session),
    user: CurrentUser = Depends(require_user),
):
    return _form_page(request, session, user)


@router.post("")
def expenses_create(
    request: Request,
    session: Session = Depends(db_session),
    user: CurrentUser = Depends(require_user),
    title: str = Form(default=""),
    amount: str = Form(default=""),
    date: str = Form(default=""),
    category_id: str = Form(default="", alias="categoryId"),
):
    try:
        create_expense(session, user, title=title, amount=amount, date=date, category_id=category_id)
        session.commit()
    except (ValidationError, IntegrityError) as e:
        session.rollback()
        log.info("user=%s create expense rejected: %s", user.id, type(e).__name__)
        return _form_page(request, session, user, error=CREATE_FAILED, status_code=400)
    return RedirectResponse(url="/expenses", status_code=303)


@router.post("/{expense_id}/delete")
def expenses_delete(
    expense_id: int,
    session: Session = Depends(db_session),
    user: CurrentUser = Depends(require_user),
):
    # Another user's id deletes nothing and still lands on the list.
    delete_owned_expense(session, user, expense_id)
    session.commit()
    return RedirectResponse(url="/expenses", status_code=303)


@api_router.get("/{expense_id}")
def expense_get(
    expense_id: int,
    session: Session = Depends(db_session),
    user: CurrentUser = Depends(require_user),
):
    try:
        expense = get_owned_expense(session, user, expense_id)
    except NotFoundError:
        return _api_error(404, "Expense not found")
    except ForbiddenError:
        return _api_error(403, "Forbidden")
    return expense_to_dict(expense)


@api_router.put("/{expense_id}")
def expense_update(
    expense_id: int,
    session: Session = Depends(db_session),
    user: CurrentUser = Depends(require_user),
    payload: Any = Body(default=None),
):
    if not isinstance(payload, dict):
        payload = {}
    try:
        expense = update_expense(session, user, expense_id, payload)
        session.commit()
    except NotFoundError:
        return _api_error(404, "Expense not found")
    except ForbiddenError:
        return _api_error(403, "Forbidden")
    except ValidationError as e:
        session.rollback()
        return _api_error(400, str(e))
    except IntegrityError:
        session.rollback()
        return _api_error(400, "Invalid category")
    return expense_to_dict(expense)

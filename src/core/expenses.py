from __future__ import annotations

import datetime as dt
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session, joinedload

from src.core.categories import category_to_dict
from src.core.errors import ForbiddenError, NotFoundError, ValidationError
from src.core.types import CurrentUser
from src.db.models import Expense
from src.utils.money import sum_amounts, to_decimal
from src.utils.time import parse_date


log = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "amount", "date", "category_id")
# Ids outside the signed 64-bit range cannot name a row in any supported store.
ID_MIN, ID_MAX = -(2**63), 2**63 - 1
FIELD_ALIASES = {"categoryId": "category_id"}


@dataclass(frozen=True)
class ExpenseListing:
    expenses: list[Expense]
    total: float


def is_owner(user: CurrentUser, expense: Expense) -> bool:
    return expense.user_id == user.id


def owned_by(user: CurrentUser):
    """Query criterion matching only rows owned by `user`."""
    return Expense.user_id == user.id


def _clean_title(value: Any) -> str:
    title = " ".join(str(value or "").split())
    if not title:
        raise ValidationError("Title is required")
    return title


def _clean_amount(value: Any) -> float:
    d = to_decimal(value)
    if d is None:
        raise ValidationError("Amount must be a number")
    amount = float(d)
    if math.isnan(amount) or math.isinf(amount):
        raise ValidationError("Amount must be a number")
    return amount


def _clean_date(value: Any) -> dt.date:
    d = parse_date(value)
    if d is None:
        raise ValidationError("Date must be YYYY-MM-DD")
    return d


def is_storable_id(value: int) -> bool:
    return ID_MIN <= value <= ID_MAX


def _clean_category_id(value: Any) -> int:
    try:
        category_id = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Category is required") from None
    if not is_storable_id(category_id):
        raise ValidationError("Invalid category")
    return category_id


_CLEANERS = {
    "title": _clean_title,
    "amount": _clean_amount,
    "date": _clean_date,
    "category_id": _clean_category_id,
}


def list_expenses(session: Session, user: CurrentUser) -> ExpenseListing:
    rows = (
        session.query(Expense)
        .options(joinedload(Expense.category))
        .filter(owned_by(user))
        .order_by(Expense.date.desc(), Expense.id.desc())
        .all()
    )
    return ExpenseListing(expenses=rows, total=sum_amounts(r.amount for r in rows))


def create_expense(
    session: Session,
    user: CurrentUser,
    *,
    title: Any,
    amount: Any,
    date: Any,
    category_id: Any,
) -> Expense:
    """
    Persist a new expense owned by `user`.

    Field problems raise ValidationError. A category id with no matching row is
    rejected by the store's foreign key and surfaces as IntegrityError on flush.
    """
    expense = Expense(
        title=_clean_title(title),
        amount=_clean_amount(amount),
        date=_clean_date(date),
        category_id=_clean_category_id(category_id),
        user_id=user.id,
    )
    session.add(expense)
    session.flush()
    log.info("user=%s created expense id=%s", user.id, expense.id)
    return expense


def get_owned_expense(session: Session, user: CurrentUser, expense_id: int) -> Expense:
    if not is_storable_id(expense_id):
        raise NotFoundError(f"Expense {expense_id} not found")
    # Existence is checked before ownership so Forbidden always means "exists, not yours".
    expense = session.query(Expense).options(joinedload(Expense.category)).filter(Expense.id == expense_id).one_or_none()
    if expense is None:
        raise NotFoundError(f"Expense {expense_id} not found")
    if not is_owner(user, expense):
        raise ForbiddenError(f"Expense {expense_id} belongs to another user")
    return expense


def normalize_changes(payload: dict[str, Any]) -> dict[str, Any]:
    """Map client field names onto editable columns; unknown keys are dropped."""
    out: dict[str, Any] = {}
    for key, value in payload.items():
        field = FIELD_ALIASES.get(key, key)
        if field in EDITABLE_FIELDS:
            out[field] = value
    return out


def update_expense(session: Session, user: CurrentUser, expense_id: int, changes: dict[str, Any]) -> Expense:
    """Partial replacement of the editable fields on an owned expense."""
    expense = get_owned_expense(session, user, expense_id)
    changes = normalize_changes(changes)
    for field in EDITABLE_FIELDS:
        if field in changes:
            setattr(expense, field, _CLEANERS[field](changes[field]))
    session.flush()
    # category_id may have changed under a loaded relationship
    session.refresh(expense)
    return expense


def delete_owned_expense(session: Session, user: CurrentUser, expense_id: int) -> int:
    """Delete by id and owner in one statement. Rows owned by someone else are left alone; returns rows deleted."""
    if not is_storable_id(expense_id):
        return 0
    result = session.execute(delete(Expense).where(Expense.id == expense_id, owned_by(user)))
    deleted = int(result.rowcount or 0)
    log.info("user=%s delete expense id=%s rows=%s", user.id, expense_id, deleted)
    return deleted


def expense_to_dict(expense: Expense) -> dict[str, Any]:
    category: Optional[dict] = category_to_dict(expense.category) if expense.category is not None else None
    return {
        "id": expense.id,
        "title": expense.title,
        "amount": expense.amount,
        "date": expense.date.isoformat() if expense.date else None,
        "category_id": expense.category_id,
        "category": category,
        "user_id": expense.user_id,
    }

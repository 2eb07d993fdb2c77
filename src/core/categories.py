from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from src.core.errors import ValidationError
from src.db.models import Category


def normalize_category_name(name: str) -> str:
    return " ".join((name or "").strip().split())


def list_categories(session: Session) -> list[Category]:
    return session.query(Category).order_by(Category.name.asc()).all()


def ensure_category(session: Session, *, name: str) -> tuple[Category, bool]:
    """Get or create a shared category. Returns (row, created)."""
    n = normalize_category_name(name)
    if not n:
        raise ValidationError("Category name is required")
    existing = session.query(Category).filter(func.lower(Category.name) == n.lower()).one_or_none()
    if existing is not None:
        return existing, False
    row = Category(name=n)
    session.add(row)
    session.flush()
    return row, True


def category_to_dict(category: Category) -> dict:
    return {"id": category.id, "name": category.name}

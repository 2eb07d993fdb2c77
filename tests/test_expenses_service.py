from __future__ import annotations

import datetime as dt

import pytest
from sqlalchemy.exc import IntegrityError

from src.core.categories import ensure_category, list_categories
from src.core.errors import ForbiddenError, NotFoundError, UsernameTakenError, ValidationError
from src.core.expenses import (
    create_expense,
    delete_owned_expense,
    expense_to_dict,
    get_owned_expense,
    is_owner,
    list_expenses,
    update_expense,
)
from src.core.types import CurrentUser
from src.core.users import authenticate, signup
from src.db.models import Expense, User


@pytest.fixture()
def users(session, auth):
    ana = signup(session, auth, username="ana", password="pw1")
    bob = signup(session, auth, username="bob", password="pw2")
    session.commit()
    return CurrentUser(id=ana.id, username=ana.username), CurrentUser(id=bob.id, username=bob.username)


@pytest.fixture()
def food(session):
    row, _ = ensure_category(session, name="Food")
    session.commit()
    return row


def test_signup_stores_hash_and_rejects_duplicates(session, auth):
    user = signup(session, auth, username="  ana ", password="pw1")
    session.commit()
    stored = session.get(User, user.id)
    assert stored.username == "ana"
    assert stored.password != "pw1"
    with pytest.raises(UsernameTakenError):
        signup(session, auth, username="ana", password="other")
    with pytest.raises(ValidationError):
        signup(session, auth, username="", password="x")


def test_authenticate_treats_unknown_user_and_bad_password_alike(session, auth, users):
    assert authenticate(session, auth, username="ana", password="pw1").username == "ana"
    assert authenticate(session, auth, username="ana", password="nope") is None
    assert authenticate(session, auth, username="ghost", password="pw1") is None


def test_list_is_owner_scoped_date_desc_with_total(session, users, food):
    ana, bob = users
    create_expense(session, ana, title="Coffee", amount="3.50", date="2024-01-01", category_id=food.id)
    create_expense(session, ana, title="Lunch", amount=12.25, date="2024-02-01", category_id=food.id)
    create_expense(session, bob, title="Taxi", amount=20, date="2024-03-01", category_id=food.id)
    session.commit()

    listing = list_expenses(session, ana)
    assert [e.title for e in listing.expenses] == ["Lunch", "Coffee"]
    assert listing.total == 15.75
    assert listing.expenses[0].category.name == "Food"

    empty = list_expenses(session, CurrentUser(id=999, username="nobody"))
    assert empty.expenses == []
    assert empty.total == 0


def test_total_does_not_drift(session, users, food):
    ana, _ = users
    for _ in range(3):
        create_expense(session, ana, title="x", amount=0.1, date="2024-01-01", category_id=food.id)
    assert list_expenses(session, ana).total == 0.3


@pytest.mark.parametrize(
    "fields",
    [
        {"title": "  ", "amount": 1, "date": "2024-01-01"},
        {"title": "a", "amount": "abc", "date": "2024-01-01"},
        {"title": "a", "amount": "nan", "date": "2024-01-01"},
        {"title": "a", "amount": 1, "date": "01/02/2024"},
    ],
)
def test_create_rejects_bad_fields(session, users, food, fields):
    ana, _ = users
    with pytest.raises(ValidationError):
        create_expense(session, ana, category_id=food.id, **fields)


def test_create_with_unknown_category_is_rejected_by_store(session, users):
    ana, _ = users
    with pytest.raises(IntegrityError):
        create_expense(session, ana, title="x", amount=1, date="2024-01-01", category_id=12345)


def test_get_checks_existence_before_ownership(session, users, food):
    ana, bob = users
    e = create_expense(session, ana, title="Coffee", amount=3.5, date="2024-01-01", category_id=food.id)
    session.commit()

    assert get_owned_expense(session, ana, e.id).id == e.id
    assert is_owner(ana, e) and not is_owner(bob, e)
    with pytest.raises(ForbiddenError):
        get_owned_expense(session, bob, e.id)
    with pytest.raises(NotFoundError):
        get_owned_expense(session, bob, e.id + 100)


def test_update_applies_only_given_fields(session, users, food):
    ana, bob = users
    transport, _ = ensure_category(session, name="Transport")
    e = create_expense(session, ana, title="Coffee", amount=3.5, date="2024-01-01", category_id=food.id)
    session.commit()

    updated = update_expense(session, ana, e.id, {"amount": "4.25", "categoryId": transport.id, "user_id": bob.id})
    session.commit()
    assert updated.title == "Coffee"
    assert updated.amount == 4.25
    assert updated.date == dt.date(2024, 1, 1)
    assert updated.user_id == ana.id
    assert expense_to_dict(updated)["category"] == {"id": transport.id, "name": "Transport"}

    with pytest.raises(ForbiddenError):
        update_expense(session, bob, e.id, {"title": "mine now"})
    with pytest.raises(ValidationError):
        update_expense(session, ana, e.id, {"title": ""})


def test_delete_is_conditional_on_owner(session, users, food):
    ana, bob = users
    e = create_expense(session, ana, title="Coffee", amount=3.5, date="2024-01-01", category_id=food.id)
    session.commit()

    assert delete_owned_expense(session, bob, e.id) == 0
    session.commit()
    assert session.get(Expense, e.id) is not None

    assert delete_owned_expense(session, ana, e.id) == 1
    session.commit()
    assert delete_owned_expense(session, ana, e.id) == 0


def test_ensure_category_is_case_insensitive(session):
    a, created = ensure_category(session, name="Books")
    b, created_again = ensure_category(session, name="  books  ")
    assert created and not created_again
    assert a.id == b.id
    assert [c.name for c in list_categories(session)] == ["Books"]
    with pytest.raises(ValidationError):
        ensure_category(session, name="   ")


def test_out_of_range_ids_behave_like_missing_rows(session, users, food):
    ana, _ = users
    huge = 2**63
    with pytest.raises(NotFoundError):
        get_owned_expense(session, ana, huge)
    assert delete_owned_expense(session, ana, huge) == 0
    with pytest.raises(ValidationError):
        create_expense(session, ana, title="x", amount=1, date="2024-01-01", category_id=huge)


def test_unknown_username_still_runs_a_password_check(session, auth, users, monkeypatch):
    calls = []
    real_verify = auth.verify_password

    def counting_verify(plaintext, hashed):
        calls.append(hashed)
        return real_verify(plaintext, hashed)

    monkeypatch.setattr(auth, "verify_password", counting_verify)
    assert authenticate(session, auth, username="ghost", password="pw1") is None
    assert authenticate(session, auth, username="ana", password="bad") is None
    assert len(calls) == 2
    assert calls[0].startswith("$2")

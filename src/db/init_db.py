from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.categories import ensure_category
from src.core.config import AppConfig
from src.db.models import Base


def init_db(engine: Engine, session_factory: sessionmaker[Session], config: AppConfig) -> int:
    """Create missing tables and seed the shared categories. Returns how many categories were added."""
    Base.metadata.create_all(bind=engine)
    # Post-create bootstrapping so the expense form always has choices.
    added = 0
    with session_factory() as session:
        for name in config.default_categories:
            _row, created = ensure_category(session, name=name)
            added += int(created)
        session.commit()
    return added

from __future__ import annotations

import logging
from typing import Optional

import typer

from src.core.config import load_config

app = typer.Typer(help="Expense Tracker CLI")


def _check_runtime() -> None:
    try:
        import sqlalchemy  # noqa: F401
    except Exception as e:
        typer.echo(
            "Runtime dependency error: SQLAlchemy failed to import.\n"
            "Create a venv and install the project:\n"
            "  python -m venv .venv\n"
            "  source .venv/bin/activate\n"
            "  pip install -e .\n\n"
            f"Original error: {type(e).__name__}: {e}",
            err=True,
        )
        raise typer.Exit(code=1)


def _store():
    from src.db.session import build_engine, build_session_factory

    config = load_config()
    engine = build_engine(config)
    return config, engine, build_session_factory(engine)


@app.command("init-db")
def init_db_cmd():
    """Create tables and seed the default categories."""
    _check_runtime()
    from src.db.init_db import init_db

    config, engine, session_factory = _store()
    added = init_db(engine, session_factory, config)
    typer.echo(f"Database ready ({added} categories added)")


@app.command("add-category")
def add_category_cmd(name: str = typer.Argument(..., help="Category name, shared by all users")):
    _check_runtime()
    from src.core.categories import ensure_category
    from src.core.errors import ValidationError
    from src.db.models import Base

    _config, engine, session_factory = _store()
    Base.metadata.create_all(bind=engine)
    with session_factory() as session:
        try:
            row, created = ensure_category(session, name=name)
        except ValidationError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(code=2)
        session.commit()
        typer.echo(f"{'Created' if created else 'Exists'}: {row.id} {row.name}")


@app.command("list-categories")
def list_categories_cmd():
    _check_runtime()
    from src.core.categories import list_categories
    from src.db.models import Base

    _config, engine, session_factory = _store()
    Base.metadata.create_all(bind=engine)
    with session_factory() as session:
        for c in list_categories(session):
            typer.echo(f"{c.id}\t{c.name}")


@app.command("serve")
def serve_cmd(
    host: Optional[str] = typer.Option(None, help="Bind address (defaults to HOST)"),
    port: Optional[int] = typer.Option(None, help="Port (defaults to PORT)"),
    reload: bool = typer.Option(False, help="Auto-reload on code changes"),
):
    _check_runtime()
    import uvicorn

    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "src.app.main:create_app",
        factory=True,
        host=host or config.host,
        port=port or config.port,
        reload=reload,
    )


if __name__ == "__main__":
    app()

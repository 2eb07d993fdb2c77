from __future__ import annotations

from typer.testing import CliRunner

from src.cli import app


def test_init_db_and_categories(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("DEFAULT_CATEGORIES", "Food,Rent")
    runner = CliRunner()

    r = runner.invoke(app, ["init-db"])
    assert r.exit_code == 0, r.output
    assert "2 categories added" in r.output

    r = runner.invoke(app, ["init-db"])
    assert "0 categories added" in r.output

    r = runner.invoke(app, ["add-category", "Travel"])
    assert r.exit_code == 0
    assert "Created" in r.output
    r = runner.invoke(app, ["add-category", "travel"])
    assert "Exists" in r.output

    r = runner.invoke(app, ["list-categories"])
    names = [line.split("\t")[1] for line in r.output.strip().splitlines()]
    assert names == ["Food", "Rent", "Travel"]


def test_add_blank_category_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    r = CliRunner().invoke(app, ["add-category", "   "])
    assert r.exit_code == 2

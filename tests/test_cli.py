"""Unit tests for main.py create-admin.

Covers:
- a new administrator is stored and can log in with the prompted password
- a taken username prints the conflict and exits 1
- mismatched confirmation and over-long passwords exit 1 without storing anything
"""

import argparse

import pytest

from auth.store import WRONG_CREDENTIALS
from core.db import create_db_engine
from core.errors import NotFound
import main


def _args(**overrides) -> argparse.Namespace:
    fields = {"username": "ops", "email": "ops@example.com", "first_name": "Ola", "last_name": "Ade"}
    fields.update(overrides)
    return argparse.Namespace(**fields)


@pytest.fixture
def cli_db(monkeypatch, engine, admin_store):
    """Point create-admin at the per-test database instead of DATABASE_URL."""
    url = engine.url.render_as_string(hide_password=False)
    monkeypatch.setattr(main, "create_db_engine", lambda _url: create_db_engine(url))
    return admin_store


def _prompts(monkeypatch, *answers: str) -> None:
    replies = iter(answers)
    monkeypatch.setattr(main.getpass, "getpass", lambda prompt="": next(replies))


def test_create_admin_success(monkeypatch, capsys, cli_db):
    _prompts(monkeypatch, "opspass99", "opspass99")
    assert main._create_admin(_args()) == 0
    assert "Administrator 'ops' created" in capsys.readouterr().out
    assert cli_db.find_by_credentials("ops@example.com", "opspass99").username == "ops"


def test_create_admin_conflict_exits_1(monkeypatch, capsys, cli_db, admin):
    _prompts(monkeypatch, "opspass99", "opspass99")
    assert main._create_admin(_args(username=admin.username)) == 1
    out = capsys.readouterr().out
    assert "[!]" in out
    assert "username" in out


def test_create_admin_mismatched_confirmation(monkeypatch, cli_db):
    _prompts(monkeypatch, "opspass99", "opspass98")
    assert main._create_admin(_args()) == 1
    with pytest.raises(NotFound, match=WRONG_CREDENTIALS):
        cli_db.find_by_credentials("ops@example.com", "opspass99")


def test_create_admin_password_over_72_bytes(monkeypatch, capsys, cli_db):
    long_password = "é" * 40
    _prompts(monkeypatch, long_password, long_password)
    assert main._create_admin(_args()) == 1
    assert "72 bytes" in capsys.readouterr().out

"""Tests for application wiring: health, bootstrap admin, settings and the admin CLI."""
from dataclasses import replace
import logging

import pytest
from fastapi.testclient import TestClient

from shop_service import create_admin
from shop_service.app import create_app
from shop_service.config import DEFAULT_JWT_SECRET, Settings
from shop_service.database import Database
from shop_service.services.admin_service import AdminService
from tests.conftest import make_settings


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_bootstrap_admin_created_at_startup(tmp_path):
    settings = replace(make_settings(tmp_path), admin_username="owner", admin_password="pw-123")

    with TestClient(create_app(settings)) as client:
        r = client.post("/api/admin/login", json={"username": "owner", "password": "pw-123"})

    assert r.status_code == 200
    assert r.json()["token"]


def test_bootstrap_admin_not_duplicated(tmp_path):
    settings = replace(make_settings(tmp_path), admin_username="owner", admin_password="pw-123")
    database = Database(settings.database_url)

    database.init_db(settings.admin_username, settings.admin_password)
    database.init_db(settings.admin_username, settings.admin_password)

    with database.session() as db:
        assert AdminService().count(db) == 1
    database.close()


def test_default_signing_secret_is_warned_about(tmp_path, caplog):
    settings = replace(make_settings(tmp_path), jwt_secret=DEFAULT_JWT_SECRET)

    with caplog.at_level(logging.WARNING, logger="shop_service.app"):
        create_app(settings)

    assert any("JWT_SECRET is not set" in r.getMessage() for r in caplog.records)


def test_configured_signing_secret_is_not_warned_about(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="shop_service.app"):
        create_app(make_settings(tmp_path))

    assert not any("JWT_SECRET" in r.getMessage() for r in caplog.records)


def test_unknown_stock_policy(tmp_path):
    with pytest.raises(ValueError):
        make_settings(tmp_path, stock_policy="eventual")


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///elsewhere.db")
    monkeypatch.setenv("STOCK_POLICY", "sequential")
    monkeypatch.setenv("JWT_SECRET", "from-env")

    settings = Settings.from_env()

    assert settings.database_url == "sqlite:///elsewhere.db"
    assert settings.stock_policy == "sequential"
    assert settings.jwt_secret == "from-env"


class TestCreateAdminCommand:

    @pytest.fixture(autouse=True)
    def _quiet_logging(self, monkeypatch):
        monkeypatch.setattr(create_admin, "setup_logging", lambda: None)

    def test_creates_admin(self, tmp_path, capsys):
        url = f"sqlite:///{tmp_path / 'cli.db'}"

        code = create_admin.main(["--username", "alice", "--password", "pw", "--database-url", url])

        assert code == 0
        assert "Created admin alice" in capsys.readouterr().out
        database = Database(url)
        with database.session() as db:
            admin = AdminService().authenticate(db, "alice", "pw")
        database.close()
        assert admin is not None

    def test_refuses_duplicate(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'cli.db'}"
        args = ["--username", "alice", "--password", "pw", "--database-url", url]

        assert create_admin.main(args) == 0
        assert create_admin.main(args) == 1

"""Фикстуры для тестов API: отдельная SQLite-база на каждый тест."""
import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Настройки приложения читаются при импорте app.config, поэтому env задаём до импорта app
_DB_DIR = Path(tempfile.mkdtemp(prefix="zvezda-tests-"))
DB_PATH = _DB_DIR / "test.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{DB_PATH}"
os.environ["SUPERUSER_LOGIN"] = "admin"
os.environ["SUPERUSER_PASSWORD"] = "admin-pass"
os.environ["SUPERUSER_NAME"] = "Иванов Иван"
os.environ["GEMINI_API_KEY"] = ""

ADMIN_CREDENTIALS = {"username": "admin", "password": "admin-pass"}
OPERATOR_CREDENTIALS = {"username": "petrov", "password": "oper-pass"}


@pytest.fixture
def client():
    """Тестовый клиент приложения на чистой базе."""
    if DB_PATH.exists():
        DB_PATH.unlink()
    from app.main import app
    with TestClient(app) as c:
        yield c


def _login(client, credentials) -> dict:
    r = client.post("/auth/login", data=credentials)
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return _login(client, ADMIN_CREDENTIALS)


@pytest.fixture
def operator_headers(client, admin_headers):
    r = client.post(
        "/users",
        json={"full_name": "Петров Пётр", "role": "OPERATOR", **OPERATOR_CREDENTIALS},
        headers=admin_headers,
    )
    assert r.status_code == 200, r.text
    return _login(client, OPERATOR_CREDENTIALS)


@pytest.fixture
def make_record():
    """Фабрика RecordData для тестов расчётов без базы."""
    from app.services.derivation import RecordData

    base = datetime(2024, 5, 1, 8, 0, 0)
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        fields = dict(
            id=n,
            date="2024-05-01",
            shift_id="1",
            operator_name="Петров Пётр",
            product_count=100,
            defect_count=0,
            downtime_minutes=0,
            created_at=base + timedelta(minutes=n),
            operator_id=1,
            comments=None,
        )
        fields.update(overrides)
        return RecordData(**fields)

    return _make

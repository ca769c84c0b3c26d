import os
import subprocess
import sys
import tempfile
from pathlib import Path

_default_test_secret = "test-jwt-secret-for-pytest-only-0000000000000000"
if len(os.environ.get("JWT_SECRET", "")) < 32:
    os.environ["JWT_SECRET"] = _default_test_secret
os.environ["ENV"] = "test"

_SQLITE_TEST_FILE = Path(tempfile.gettempdir()) / "tintix_test.db"
TEST_DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{_SQLITE_TEST_FILE}")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from tintix import database
from tintix import models  # noqa: F401
from tintix.main import app
from tintix.models.film import Film, FilmInventory
from tintix.models.user import User
from tintix.schemas.job_entry import JobEntryCreate
from tintix.services import job_entry_service

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture(scope="session", autouse=True)
def _prepare_test_database() -> None:
    if TEST_DATABASE_URL.startswith("sqlite") and _SQLITE_TEST_FILE.exists():
        _SQLITE_TEST_FILE.unlink()

    env = os.environ.copy()
    env["DATABASE_URL"] = TEST_DATABASE_URL

    subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        check=True,
        cwd=PROJECT_ROOT,
        env=env,
    )

    database.configure_database()


def _empty_tables() -> None:
    with database.engine.begin() as conn:
        for table in reversed(database.Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(scope="function", autouse=True)
def _empty_tables_between_tests():
    _empty_tables()
    yield
    _empty_tables()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user():
    def _make(
        user_id: str = "manager@example.com",
        role: str = "manager",
        hourly_rate="0",
        first_name: str = "Test",
        last_name: str = "User",
        is_active: bool = True,
    ) -> User:
        db = database.SessionLocal()
        try:
            row = User(
                id=user_id,
                email=user_id,
                first_name=first_name,
                last_name=last_name,
                role=role,
                hourly_rate=Decimal(str(hourly_rate)),
                is_active=is_active,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return row
        finally:
            db.close()

    return _make


@pytest.fixture
def make_film():
    def _make(name: str = "Ceramic 35", cost_per_sqft="2.00", stock="0", minimum="0", film_type="ceramic") -> Film:
        db = database.SessionLocal()
        try:
            row = Film(name=name, type=film_type, cost_per_sqft=Decimal(str(cost_per_sqft)), is_active=True)
            row.inventory = FilmInventory(current_stock=Decimal(str(stock)), minimum_stock=Decimal(str(minimum)))
            db.add(row)
            db.commit()
            db.refresh(row)
            return row
        finally:
            db.close()

    return _make


@pytest.fixture
def make_job():
    """Create a job entry through the service so derived fields are filled the normal way."""

    def _make(installer_ids, job_number: str = "J-1", date: datetime = datetime(2026, 3, 5, 10, 0), **fields):
        if isinstance(installer_ids, str):
            installer_ids = [installer_ids]
        payload = JobEntryCreate(
            job_number=job_number,
            date=date,
            vehicle_year=fields.pop("vehicle_year", "2022"),
            vehicle_make=fields.pop("vehicle_make", "Toyota"),
            vehicle_model=fields.pop("vehicle_model", "Camry"),
            installers=fields.pop(
                "installers",
                [{"installer_id": i, "time_variance": 0} for i in installer_ids],
            ),
            **fields,
        )
        return job_entry_service.create_job_entry(payload, user_id=installer_ids[0])

    return _make


@pytest.fixture
def auth_headers(client):
    def _headers(user_id: str) -> dict:
        resp = client.post("/auth/token", json={"userId": user_id})
        assert resp.status_code == 200, f"token request failed: {resp.status_code} {resp.text}"
        data = resp.json()
        assert "access_token" in data, f"token response missing access_token: {data}"
        return {"Authorization": f"Bearer {data['access_token']}"}

    return _headers

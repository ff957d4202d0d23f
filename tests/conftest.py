"""
Shared test fixtures for the CAFM HR Console test suite.

The database is a fresh in-memory aiosqlite engine per test and the remote
CAFM API is replaced by ``FakeCafm`` behind ``httpx.MockTransport``.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SEED_DEFAULT_HOLIDAYS"] = "false"
os.environ["EXPORT_RATE_LIMIT"] = "1000/minute"

import httpx
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import (
    Principal,
    get_cafm_client,
    get_current_principal,
    get_db,
    get_service_client,
)
from app.db.base import Base
from app.main import app
from app.services.upstream import CafmClient

FAKE_BASE_URL = "http://cafm.test/api"


class FakeCafm:
    """In-memory stand-in for the CAFM REST API, served through MockTransport."""

    def __init__(self) -> None:
        self.kyc_forms: list[dict] = []
        self.attendance: dict[tuple[str, int, int], list[dict]] = {}
        self.balances: dict[str, dict] = {}
        self.history: dict[str, list[dict]] = {}
        self.leaves: list[dict] = []
        self.fail_paths: dict[str, int] = {}
        self.calls: list[str] = []

    # ── Fixture builders ────────────────────────────────────────────
    def add_employee(self, employee_id, full_name, designation="Supervisor", project="Alpha"):
        self.kyc_forms.append(
            {
                "_id": f"kyc-{employee_id}",
                "personalDetails": {
                    "employeeId": employee_id,
                    "fullName": full_name,
                    "designation": designation,
                    "projectName": project,
                    "email": f"{employee_id.lower()}@example.com",
                },
            }
        )

    def add_punch(self, employee_id, day: str, punch_in: str | None, punch_out: str | None):
        year, month = int(day[:4]), int(day[5:7])
        self.attendance.setdefault((employee_id, month, year), []).append(
            {
                "_id": f"att-{employee_id}-{day}",
                "employeeId": employee_id,
                "date": f"{day}T00:00:00.000Z",
                "punchInTime": punch_in,
                "punchOutTime": punch_out,
                "projectName": "Alpha",
            }
        )

    def set_used_leave(self, employee_id, **used):
        self.balances[employee_id] = {
            "employeeId": employee_id,
            "employeeName": employee_id,
            "year": 2025,
            "balances": {
                code: {
                    "allocated": 12,
                    "used": used.get(code, 0),
                    "remaining": 12 - used.get(code, 0),
                    "pending": 0,
                }
                for code in ("EL", "SL", "CL", "CompOff")
            },
            "totalAllocated": 48,
        }

    # ── Transport ───────────────────────────────────────────────────
    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        self.calls.append(path)
        if path in self.fail_paths:
            return httpx.Response(self.fail_paths[path], json={"message": "boom"})

        params = request.url.params
        if path == "/kyc":
            wanted = params.get("employeeId")
            forms = [
                f for f in self.kyc_forms
                if wanted is None or f["personalDetails"]["employeeId"] == wanted
            ]
            return httpx.Response(200, json={"kycForms": forms})
        if path == "/attendance/report/monthly/employee":
            key = (params["employeeId"], int(params["month"]), int(params["year"]))
            if key not in self.attendance:
                return httpx.Response(404, json={"message": "No attendance"})
            return httpx.Response(200, json={"attendance": self.attendance[key]})
        if path == "/attendance/all":
            rows = [r for rows in self.attendance.values() for r in rows]
            return httpx.Response(200, json={"attendance": rows})
        if path.startswith("/leave/balance/"):
            emp = path.rsplit("/", 1)[1]
            if emp not in self.balances:
                return httpx.Response(404, json={"message": "No balance"})
            return httpx.Response(200, json=self.balances[emp])
        if path.startswith("/leave/history/"):
            emp = path.rsplit("/", 1)[1]
            body = {"employeeId": emp, "leaveHistory": self.history.get(emp, [])}
            return httpx.Response(200, json=body)
        if path == "/leave/all":
            return httpx.Response(200, json={"leaves": self.leaves})
        if path == "/project/projects":
            return httpx.Response(200, json=[])
        return httpx.Response(404, json={"message": "Not found"})

    def client(self) -> CafmClient:
        return CafmClient(
            base_url=FAKE_BASE_URL,
            token="test-token",
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def fake_cafm() -> FakeCafm:
    return FakeCafm()


@pytest.fixture
async def db_sessionmaker():
    """Fresh in-memory database per test with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(db_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with db_sessionmaker() as session:
        yield session


# ── Auth Overrides ──────────────────────────────────────────────────
def as_role(role: str) -> None:
    """Make every request in the current test run as ``role``."""

    async def _principal() -> Principal:
        return Principal(subject="tester", role=role, token="test-token")

    app.dependency_overrides[get_current_principal] = _principal


@pytest.fixture
async def async_client(db_sessionmaker, fake_cafm) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app, the test DB and the fake CAFM API."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with db_sessionmaker() as session:
            yield session

    async def _override_cafm() -> AsyncGenerator[CafmClient, None]:
        async with fake_cafm.client() as client:
            yield client

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_cafm_client] = _override_cafm
    app.dependency_overrides[get_service_client] = _override_cafm
    as_role("admin")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def set_role(async_client):
    """Switch the caller's role after the client fixture installed the admin default."""
    return as_role

"""Tests for the CAFM client decode boundary and error mapping."""

import asyncio
from datetime import date, datetime, timezone

import httpx
import pytest

from app.core.exceptions import UpstreamError
from app.schemas.attendance import AttendanceRecord
from app.services.upstream import CafmClient, decode_items, gather_bounded


def _client(handler) -> CafmClient:
    return CafmClient(base_url="http://cafm.test/api", transport=httpx.MockTransport(handler))


# ── Decode boundary ─────────────────────────────────────────────────
def test_decode_items_skips_malformed(caplog):
    items = [
        {
            "employeeId": "E1",
            "date": "2025-06-10T00:00:00.000Z",
            "punchInTime": "2025-06-10T09:00:00Z",
        },
        {"employeeId": "", "date": "2025-06-10"},
        {"employeeId": "E2", "date": "not-a-date"},
        {"date": "2025-06-10"},
        "garbage",
        {"employeeId": "E3", "date": "2025-06-11", "punchInTime": "yesterday"},
    ]
    with caplog.at_level("WARNING"):
        records = decode_items(AttendanceRecord, items, "attendance")

    assert [r.employee_id for r in records] == ["E1", "E3"]
    assert records[0].date == date(2025, 6, 10)
    assert records[0].punch_in_time == datetime(2025, 6, 10, 9, 0, tzinfo=timezone.utc)
    # unparseable timestamp survives as a missing punch
    assert records[1].punch_in_time is None
    assert "Skipped 4 malformed attendance item(s)" in caplog.text


def test_decode_items_tolerates_none():
    assert decode_items(AttendanceRecord, None, "attendance") == []


def test_date_key_keeps_calendar_day():
    rec = AttendanceRecord.model_validate({"employeeId": "E1", "date": "2025-06-10T23:30:00Z"})
    assert rec.date == date(2025, 6, 10)


# ── Endpoints ───────────────────────────────────────────────────────
async def test_monthly_attendance_sends_query_and_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(
            200,
            json={"attendance": [{"employeeId": "E1", "date": "2025-06-02", "punchInTime": None}]},
        )

    async with CafmClient(
        base_url="http://cafm.test/api",
        token="abc",
        transport=httpx.MockTransport(handler),
    ) as client:
        records = await client.monthly_attendance("E1", 6, 2025)

    assert seen["path"] == "/api/attendance/report/monthly/employee"
    assert seen["params"] == {"employeeId": "E1", "month": "6", "year": "2025"}
    assert seen["auth"] == "Bearer abc"
    assert len(records) == 1


async def test_envelope_under_data_key():
    def handler(request):
        return httpx.Response(
            200, json={"data": {"attendance": [{"employeeId": "E1", "date": "2025-06-02"}]}}
        )

    async with _client(handler) as client:
        records = await client.all_attendance()
    assert [r.employee_id for r in records] == ["E1"]


async def test_employees_read_personal_details():
    def handler(request):
        return httpx.Response(
            200,
            json={
                "kycForms": [
                    {"personalDetails": {"employeeId": "E1", "fullName": "Asha Rao"}},
                    {"personalDetails": None},
                    {"documents": []},
                    {"personalDetails": {"employeeId": "E2", "dateOfJoining": "bogus"}},
                ]
            },
        )

    async with _client(handler) as client:
        profiles = await client.employees()

    assert [p.employee_id for p in profiles] == ["E1", "E2"]
    assert profiles[0].full_name == "Asha Rao"
    assert profiles[1].date_of_joining is None


async def test_employee_lookup_returns_none_when_missing():
    def handler(request):
        return httpx.Response(200, json={"kycForms": []})

    async with _client(handler) as client:
        assert await client.employee("NOPE") is None


async def test_leave_balance_fills_employee_id():
    def handler(request):
        return httpx.Response(
            200, json={"balances": {"EL": {"allocated": 12, "used": 2, "remaining": 10}}}
        )

    async with _client(handler) as client:
        snapshot = await client.leave_balance("E7")

    assert snapshot.employee_id == "E7"
    assert snapshot.balances["EL"].used == 2


async def test_leave_balance_malformed_is_upstream_error():
    def handler(request):
        return httpx.Response(200, json={"balances": {"EL": {"used": -3}}})

    async with _client(handler) as client:
        with pytest.raises(UpstreamError) as exc_info:
            await client.leave_balance("E7")
    assert exc_info.value.status_code == 502


async def test_leave_history_items_inherit_employee_id():
    def handler(request):
        return httpx.Response(
            200,
            json={
                "leaveHistory": [
                    {"leaveType": "EL", "startDate": "2025-06-02", "endDate": "2025-06-03",
                     "numberOfDays": 2, "status": "Approved"},
                    {"leaveType": "SL"},
                ]
            },
        )

    async with _client(handler) as client:
        history = await client.leave_history("E9")

    assert len(history) == 1
    assert history[0].employee_id == "E9"
    assert history[0].number_of_days == 2


# ── Errors ──────────────────────────────────────────────────────────
@pytest.mark.parametrize("status", [401, 404, 500])
async def test_http_status_maps_to_upstream_error(status):
    def handler(request):
        return httpx.Response(status, json={"message": "nope"})

    async with _client(handler) as client:
        with pytest.raises(UpstreamError) as exc_info:
            await client.all_leaves()
    assert exc_info.value.status_code == status


async def test_transport_failure_is_503():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(UpstreamError) as exc_info:
            await client.employees()
    assert exc_info.value.status_code == 503


async def test_non_json_body_is_502():
    def handler(request):
        return httpx.Response(200, content=b"<html>maintenance</html>")

    async with _client(handler) as client:
        with pytest.raises(UpstreamError) as exc_info:
            await client.employees()
    assert exc_info.value.status_code == 502


async def test_ping():
    async with _client(lambda r: httpx.Response(401)) as client:
        assert await client.ping() is True
    async with _client(lambda r: httpx.Response(503)) as client:
        assert await client.ping() is False


# ── Concurrency ─────────────────────────────────────────────────────
async def test_gather_bounded_keeps_order_and_limit():
    running = 0
    peak = 0

    async def job(i: int) -> int:
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01 * (5 - i % 5))
        running -= 1
        return i

    results = await gather_bounded((job(i) for i in range(12)), limit=3)

    assert results == list(range(12))
    assert peak <= 3

"""
Async client for the remote CAFM REST API.

Every response is decoded into typed schemas here, so the classifier and
aggregator never see raw JSON. List items that fail validation are logged
and skipped; transport and HTTP status failures raise ``UpstreamError``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from typing import Any, TypeVar

import httpx
import pydantic

from app.core.config import settings
from app.core.exceptions import UpstreamError
from app.schemas.attendance import AttendanceRecord
from app.schemas.employee import EmployeeProfile
from app.schemas.leave import LeaveBalanceSnapshot, LeaveRequest

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)
R = TypeVar("R")


def decode_items(model: type[M], items: Iterable[Any], source: str) -> list[M]:
    """Validate each item, dropping the malformed ones."""
    decoded: list[M] = []
    skipped = 0
    for item in items or []:
        try:
            decoded.append(model.model_validate(item))
        except pydantic.ValidationError as exc:
            skipped += 1
            logger.debug("Rejected %s item: %s", source, exc)
    if skipped:
        logger.warning("Skipped %d malformed %s item(s)", skipped, source)
    return decoded


async def gather_bounded(coros: Iterable[Awaitable[R]], limit: int) -> list[R]:
    """Run awaitables concurrently, at most ``limit`` at a time, keeping input order."""
    semaphore = asyncio.Semaphore(max(1, limit))

    async def _run(coro: Awaitable[R]) -> R:
        async with semaphore:
            return await coro

    return list(await asyncio.gather(*(_run(c) for c in coros)))


class CafmClient:
    """Thin wrapper around ``httpx.AsyncClient`` for the CAFM endpoints we read."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.CAFM_API_URL,
            headers=headers,
            timeout=timeout or settings.UPSTREAM_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> CafmClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        logger.debug("GET %s %s", path, params or "")
        try:
            resp = await self._client.get(path, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                exc.response.status_code,
                f"Error calling {path}: {exc.response.text[:200]}",
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(503, f"Error calling {path}: {exc}") from exc
        except ValueError as exc:
            raise UpstreamError(502, f"Non-JSON response from {path}") from exc

    # ── Attendance ──────────────────────────────────────────────────
    async def monthly_attendance(
        self, employee_id: str, month: int, year: int
    ) -> list[AttendanceRecord]:
        data = await self._get(
            "/attendance/report/monthly/employee",
            params={"employeeId": employee_id, "month": month, "year": year},
        )
        return decode_items(AttendanceRecord, _field(data, "attendance"), "attendance")

    async def all_attendance(self) -> list[AttendanceRecord]:
        data = await self._get("/attendance/all")
        return decode_items(AttendanceRecord, _field(data, "attendance"), "attendance")

    # ── Leave ───────────────────────────────────────────────────────
    async def leave_balance(self, employee_id: str) -> LeaveBalanceSnapshot:
        data = await self._get(f"/leave/balance/{employee_id}")
        if isinstance(data, dict):
            data.setdefault("employeeId", employee_id)
        try:
            return LeaveBalanceSnapshot.model_validate(data)
        except pydantic.ValidationError as exc:
            raise UpstreamError(502, f"Malformed leave balance for {employee_id}") from exc

    async def leave_history(self, employee_id: str) -> list[LeaveRequest]:
        data = await self._get(f"/leave/history/{employee_id}")
        items = _field(data, "leaveHistory")
        for item in items:
            if isinstance(item, dict):
                item.setdefault("employeeId", employee_id)
        return decode_items(LeaveRequest, items, "leave history")

    async def all_leaves(self) -> list[LeaveRequest]:
        data = await self._get("/leave/all")
        return decode_items(LeaveRequest, _field(data, "leaves"), "leave")

    # ── Employees (KYC) ─────────────────────────────────────────────
    async def employees(self) -> list[EmployeeProfile]:
        data = await self._get("/kyc")
        forms = _field(data, "kycForms")
        details = [
            f.get("personalDetails")
            for f in forms
            if isinstance(f, dict) and isinstance(f.get("personalDetails"), dict)
        ]
        return decode_items(EmployeeProfile, details, "kyc")

    async def employee(self, employee_id: str) -> EmployeeProfile | None:
        data = await self._get("/kyc", params={"employeeId": employee_id})
        forms = _field(data, "kycForms")
        details = [
            f.get("personalDetails")
            for f in forms
            if isinstance(f, dict) and isinstance(f.get("personalDetails"), dict)
        ]
        profiles = decode_items(EmployeeProfile, details, "kyc")
        return next((p for p in profiles if p.employee_id == employee_id), None)

    async def ping(self) -> bool:
        try:
            resp = await self._client.get("/project/projects")
        except httpx.HTTPError as exc:
            logger.error("Upstream health check failure: %s", exc)
            return False
        return resp.status_code < 500


def _field(data: Any, key: str) -> list[Any]:
    """Pull a list out of an envelope; tolerate ``{"data": {...}}`` wrapping."""
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return []
    value = data.get(key)
    if value is None and isinstance(data.get("data"), dict):
        value = data["data"].get(key)
    return value if isinstance(value, list) else []

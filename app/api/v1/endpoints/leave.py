"""
Leave endpoints: request listing and per-employee balances.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.v1.deps import Principal, get_cafm_client, require_report_access
from app.schemas.leave import LeaveBalanceSnapshot, LeaveRequest
from app.schemas.report import Page
from app.services.tables import LEAVE_TABLE
from app.services.upstream import CafmClient

router = APIRouter(prefix="/leave", tags=["leave"])


@router.get(
    "/requests",
    response_model=Page[LeaveRequest],
    response_model_by_alias=False,
)
async def list_leave_requests(
    search: str | None = Query(default=None, description="Employee ID, name or reason"),
    status: str | None = Query(default=None, description="Pending / Approved / Rejected"),
    leave_type: str | None = Query(default=None, description="EL / SL / CL / CompOff"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
    client: CafmClient = Depends(get_cafm_client),
    _principal: Principal = Depends(require_report_access),
) -> Page[LeaveRequest]:
    """All leave requests, newest first."""
    requests = sorted(await client.all_leaves(), key=lambda r: r.start_date, reverse=True)
    return LEAVE_TABLE.apply(
        requests,
        search=search,
        filter_values={"status": status, "leave_type": leave_type},
        page=page,
        page_size=page_size,
    )


@router.get(
    "/balance/{employee_id}",
    response_model=LeaveBalanceSnapshot,
    response_model_by_alias=False,
)
async def leave_balance(
    employee_id: str,
    client: CafmClient = Depends(get_cafm_client),
    _principal: Principal = Depends(require_report_access),
) -> LeaveBalanceSnapshot:
    return await client.leave_balance(employee_id)

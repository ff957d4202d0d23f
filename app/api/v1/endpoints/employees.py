"""
Employee directory endpoints, backed by the CAFM KYC forms.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.v1.deps import Principal, get_cafm_client, require_report_access
from app.schemas.employee import EmployeeProfile
from app.schemas.report import Page
from app.services.tables import EMPLOYEE_TABLE
from app.services.upstream import CafmClient

router = APIRouter(tags=["employees"])


@router.get(
    "/employees",
    response_model=Page[EmployeeProfile],
    response_model_by_alias=False,
)
async def list_employees(
    search: str | None = Query(default=None, description="ID, name or email"),
    project: str | None = Query(default=None),
    designation: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
    client: CafmClient = Depends(get_cafm_client),
    _principal: Principal = Depends(require_report_access),
) -> Page[EmployeeProfile]:
    profiles = await client.employees()
    return EMPLOYEE_TABLE.apply(
        profiles,
        search=search,
        filter_values={"project": project, "designation": designation},
        page=page,
        page_size=page_size,
    )


@router.get(
    "/employees/{employee_id}",
    response_model=EmployeeProfile,
    response_model_by_alias=False,
)
async def get_employee(
    employee_id: str,
    client: CafmClient = Depends(get_cafm_client),
    _principal: Principal = Depends(require_report_access),
) -> EmployeeProfile:
    profile = await client.employee(employee_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    return profile

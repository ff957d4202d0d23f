"""
V1 API router aggregator, wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import attendance, employees, holidays, leave, reports

api_router = APIRouter()

# Punch classification, raw monthly records
api_router.include_router(attendance.router)

# Employee directory (KYC)
api_router.include_router(employees.router)

# Leave requests and balances
api_router.include_router(leave.router)

# Holiday calendar
api_router.include_router(holidays.router)

# Monthly summaries, exports, health
api_router.include_router(reports.router)

"""
Table configurations for every listing the console serves or exports.
"""

from __future__ import annotations

from app.schemas.employee import EmployeeProfile
from app.schemas.leave import LeaveRequest
from app.schemas.report import SummaryRow
from app.services.report_table import Column, ReportTable, attr

EMPLOYEE_TABLE: ReportTable[EmployeeProfile] = ReportTable(
    columns=[
        Column("Employee ID", attr("employee_id")),
        Column("Name", attr("full_name")),
        Column("Designation", attr("designation")),
        Column("Project", attr("project_name")),
        Column("Email", attr("email")),
        Column("Phone", attr("phone_number")),
        Column("Date of Joining", attr("date_of_joining")),
    ],
    search_fields=[attr("employee_id"), attr("full_name"), attr("email")],
    filters={"project": attr("project_name"), "designation": attr("designation")},
)

LEAVE_TABLE: ReportTable[LeaveRequest] = ReportTable(
    columns=[
        Column("Leave ID", attr("leave_id")),
        Column("Employee ID", attr("employee_id")),
        Column("Name", attr("employee_name")),
        Column("Type", attr("leave_type")),
        Column("From", attr("start_date")),
        Column("To", attr("end_date")),
        Column("Days", attr("number_of_days")),
        Column("Status", attr("status")),
        Column("Reason", attr("reason")),
    ],
    search_fields=[attr("employee_id"), attr("employee_name"), attr("reason")],
    filters={"status": attr("status"), "leave_type": attr("leave_type")},
)


def _leave(code: str):
    return lambda r: r.summary.used_leave_by_type.get(code, 0)


SUMMARY_TABLE: ReportTable[SummaryRow] = ReportTable(
    columns=[
        Column("Employee ID", attr("employee_id")),
        Column("Name", attr("full_name")),
        Column("Designation", attr("designation")),
        Column("Project", attr("project_name")),
        Column("Total Days", attr("summary.total_days_in_month")),
        Column("Present", attr("summary.present_days")),
        Column("Half Days", attr("summary.half_days")),
        Column("Partially Absent", attr("summary.partial_absent_days")),
        Column("Week Offs", attr("summary.week_off_days")),
        Column("Holidays", attr("summary.holiday_days")),
        Column("EL", _leave("EL")),
        Column("SL", _leave("SL")),
        Column("CL", _leave("CL")),
        Column("Comp Off", _leave("CompOff")),
        Column("LOP", attr("summary.loss_of_pay_days")),
        Column("Payable Days", attr("summary.total_payable_days")),
        Column("Attendance %", attr("summary.attendance_percentage")),
    ],
    search_fields=[attr("employee_id"), attr("full_name")],
    filters={"project": attr("project_name"), "designation": attr("designation")},
)

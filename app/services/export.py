"""
CSV / Excel / PDF renderings of monthly summaries.

The binary formats are produced by openpyxl and reportlab; this module only
lays out rows and cells.
"""

from __future__ import annotations

import calendar
import csv
import io
from collections.abc import Iterator, Sequence
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.schemas.attendance import DayCell
from app.schemas.employee import EmployeeProfile
from app.schemas.report import MonthlySummary, SummaryRow
from app.services.report_table import ReportTable
from app.services.tables import SUMMARY_TABLE

_HEADER_FILL = PatternFill(start_color="2980B9", end_color="2980B9", fill_type="solid")


def _cell(value: Any) -> Any:
    return "" if value is None else value


# ── CSV ─────────────────────────────────────────────────────────────
def table_to_csv(table: ReportTable, rows: Sequence[Any]) -> Iterator[str]:
    """Yield the CSV header line, then one line per row."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")

    def _flush() -> str:
        text = buf.getvalue()
        buf.seek(0)
        buf.truncate(0)
        return text

    writer.writerow(table.headers())
    yield _flush()
    for row in rows:
        writer.writerow([_cell(v) for v in table.row_values(row)])
        yield _flush()


def summaries_to_csv(rows: Sequence[SummaryRow]) -> Iterator[str]:
    return table_to_csv(SUMMARY_TABLE, rows)


# ── Excel ───────────────────────────────────────────────────────────
def table_to_xlsx(table: ReportTable, rows: Sequence[Any], title: str) -> io.BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    headers = table.headers()
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = _HEADER_FILL
        cell.alignment = Alignment(horizontal="center", vertical="center")
        ws.column_dimensions[get_column_letter(col_idx)].width = max(len(header) + 4, 12)

    for row_idx, row in enumerate(rows, start=2):
        for col_idx, value in enumerate(table.row_values(row), start=1):
            ws.cell(row=row_idx, column=col_idx, value=_cell(value))

    ws.freeze_panes = "A2"
    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output


def summaries_to_xlsx(rows: Sequence[SummaryRow], title: str) -> io.BytesIO:
    return table_to_xlsx(SUMMARY_TABLE, rows, title)


# ── PDF ─────────────────────────────────────────────────────────────
_REGISTER_COLUMNS = [
    ("Date", 40),
    ("Day", 110),
    ("Check In", 180),
    ("Check Out", 250),
    ("Hours", 320),
    ("Shortage", 375),
    ("Day Type", 435),
    ("Status", 500),
]


def _fmt_time(ts) -> str:
    return ts.strftime("%I:%M %p") if ts else "-"


def _day_label(cell: DayCell) -> str:
    if cell.leave:
        return f"Leave ({cell.register_code})"
    return cell.status.label if cell.status else "-"


def employee_month_pdf(
    profile: EmployeeProfile | None,
    summary: MonthlySummary,
    days: Sequence[DayCell],
) -> io.BytesIO:
    """Two-part PDF: the day register followed by the monthly summary."""
    buffer = io.BytesIO()
    page_width, page_height = A4
    c = canvas.Canvas(buffer, pagesize=A4)
    period = f"{calendar.month_name[summary.month]} {summary.year}"

    def _page_header() -> float:
        c.setFont("Helvetica-Bold", 14)
        c.drawString(40, page_height - 40, f"Attendance Report: {period}")
        c.setFont("Helvetica", 10)
        name = profile.full_name if profile else ""
        c.drawString(40, page_height - 58, f"Employee: {summary.employee_id} {name}".rstrip())
        if profile and (profile.designation or profile.project_name):
            c.drawString(
                40,
                page_height - 72,
                f"{profile.designation or ''}  {profile.project_name or ''}".strip(),
            )
        y = page_height - 100
        c.setFont("Helvetica-Bold", 9)
        for label, x in _REGISTER_COLUMNS:
            c.drawString(x, y, label)
        c.line(40, y - 4, page_width - 40, y - 4)
        c.setFont("Helvetica", 9)
        return y - 16

    y = _page_header()
    for cell in days:
        if y < 60:
            c.showPage()
            y = _page_header()
        values = [
            cell.date.strftime("%d-%m-%Y"),
            cell.weekday,
            _fmt_time(cell.punch_in_time),
            _fmt_time(cell.punch_out_time),
            f"{cell.hours_worked:.2f}",
            f"{cell.shortage_hours:.2f}",
            cell.day_type.value.replace("_", " ").title(),
            _day_label(cell),
        ]
        for (_, x), value in zip(_REGISTER_COLUMNS, values):
            c.drawString(x, y, value)
        y -= 14

    c.showPage()
    c.setFont("Helvetica-Bold", 14)
    c.drawString(40, page_height - 40, f"Monthly Summary: {period}")
    c.setFont("Helvetica", 11)
    used = summary.used_leave_by_type
    lines = [
        f"Total Days: {summary.total_days_in_month}",
        f"Present Days: {summary.present_days}",
        f"Half Days: {summary.half_days}",
        f"Partially Absent: {summary.partial_absent_days}",
        f"Week Offs: {summary.week_off_days}",
        f"Holidays: {summary.holiday_days}",
        "Leave Used: "
        + ", ".join(f"{code} {used.get(code, 0):g}" for code in ("EL", "SL", "CL", "CompOff")),
        f"LOP: {summary.loss_of_pay_days}",
        f"Total Payable Days: {summary.total_payable_days:g}",
        f"Attendance Percentage: {summary.attendance_percentage:.2f}%",
    ]
    y = page_height - 70
    for line in lines:
        c.drawString(40, y, line)
        y -= 18

    c.save()
    buffer.seek(0)
    return buffer

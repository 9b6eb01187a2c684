# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: spreadsheet rendering of a built report (openpyxl).
"""

import io
from datetime import datetime, timezone
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter

from status_tracker.core.exceptions import ServerFault
from status_tracker.core.logging import get_logger

logger = get_logger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

FIXED_WIDTHS = (15, 20, 30)
DATE_COLUMN_WIDTH = 25
LEAVE_HEADER = ["Team", "User", "Date", "Reason"]
LEAVE_WIDTHS = (15, 20, 14, 40)

BOLD = Font(bold=True)
HEADER_ALIGN = Alignment(vertical="center", horizontal="center", wrap_text=True)
CELL_ALIGN = Alignment(vertical="top", wrap_text=True)
THIN = Side(style="thin")
THIN_BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)


def _style_sheet(ws, bold_columns: int) -> None:
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is None:
                continue
            cell.border = THIN_BORDER
            if cell.row == 1:
                cell.font = BOLD
                cell.alignment = HEADER_ALIGN
                continue
            cell.alignment = CELL_ALIGN
            if cell.column <= bold_columns:
                cell.font = BOLD


def _write_grid(ws, report: dict[str, Any]) -> None:
    header = report["header"]
    ws.append(header)
    for row in report["rows"]:
        if row:
            ws.append(row)
        else:
            ws.append([None])

    for idx, width in enumerate(FIXED_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width
    for idx in range(len(FIXED_WIDTHS) + 1, len(header) + 1):
        ws.column_dimensions[get_column_letter(idx)].width = DATE_COLUMN_WIDTH
    ws.freeze_panes = "D2"
    _style_sheet(ws, bold_columns=len(FIXED_WIDTHS))


def _write_leave(ws, report: dict[str, Any]) -> None:
    ws.append(LEAVE_HEADER)
    for entry in report["leave"]:
        ws.append([entry["team"], entry["user"], entry["date"], entry.get("reason") or ""])
    for idx, width in enumerate(LEAVE_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width
    _style_sheet(ws, bold_columns=0)


def render_workbook(report: dict[str, Any]) -> bytes:
    """Render the report as xlsx bytes. Raises ServerFault on failure."""
    try:
        wb = Workbook()
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        wb.properties.creator = "Status Tracker"
        wb.properties.created = now
        wb.properties.modified = now

        grid = wb.active
        grid.title = "Status Report"
        _write_grid(grid, report)
        _write_leave(wb.create_sheet("Leave"), report)

        output = io.BytesIO()
        wb.save(output)
        return output.getvalue()
    except Exception as exc:
        logger.exception("Workbook rendering failed")
        raise ServerFault("Could not render the report workbook") from exc

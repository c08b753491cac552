"""Excel payroll export (one row per worker)."""

from __future__ import annotations

import io
from datetime import date
from decimal import Decimal
from typing import Iterable

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .service import ExportRow

SHEET_NAME = "Lương Nhân Viên"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

COLUMNS = [
    "ID",
    "Họ tên",
    "Chức vụ",
    "Tổng giờ làm",
    "Tổng lương sự nghiệp",
    "Giờ hôm nay",
    "Lương hôm nay",
    "Trạng thái hôm nay",
]
COLUMN_WIDTHS = [8, 28, 25, 15, 25, 15, 22, 20]

_HEADER_FONT = Font(bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFB74D")
_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")


def format_usd(amount: Decimal) -> str:
    """``Decimal("1234.5")`` -> ``"$1,234.5"`` (trailing zeros dropped)."""
    text = f"{amount:,.2f}".rstrip("0").rstrip(".")
    return f"${text}"


def export_filename(today: date) -> str:
    return f"Luong_Toan_Server_{today.strftime('%d-%m-%Y')}.xlsx"


def rows_to_frame(rows: Iterable[ExportRow]) -> pd.DataFrame:
    data = [
        [
            r.worker_id,
            r.display_name,
            r.title,
            float(r.total_hours),
            format_usd(r.total_wage),
            float(r.today_hours),
            format_usd(r.today_wage),
            r.today_status.label,
        ]
        for r in rows
    ]
    return pd.DataFrame(data, columns=COLUMNS)


def build_payroll_workbook(rows: Iterable[ExportRow]) -> bytes:
    df = rows_to_frame(rows)

    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
        ws = writer.sheets[SHEET_NAME]

        for cell in ws[1]:
            cell.font = _HEADER_FONT
            cell.fill = _HEADER_FILL
            cell.alignment = _HEADER_ALIGN

        for idx, width in enumerate(COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(idx)].width = width

    return out.getvalue()

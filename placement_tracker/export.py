"""
Spreadsheet export.

One worksheet per reporter (in order of first appearance) followed by an
"All Reports" sheet. Every sheet starts with the same 13-column header row.
Cell values are the raw report values: offer counts stay text, nothing is
coerced to 0.
"""

import re
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill

from placement_tracker.exceptions import ExportError
from placement_tracker.logging_config import logger
from placement_tracker.models import ReportRecord


ALL_REPORTS_SHEET = "All Reports"
MAX_SHEET_TITLE = 31

_INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="1E40AF", end_color="1E40AF", fill_type="solid")


def export_headers(college_a: str = "SNSCE", college_b: str = "SNSCT") -> List[str]:
    return [
        "Date",
        "FY Offers Received",
        "FY Total Since April",
        "FY Remarks",
        f"{college_a} Unplaced",
        f"{college_b} Unplaced",
        "Awaited Results",
        "PFY Offers Today",
        "PFY Total Since April",
        "PFY Remarks",
        "High Salary Offers Today",
        "High Salary Total Since April",
        "High Salary Remarks",
    ]


def export_row(record: ReportRecord) -> List[Any]:
    fy = record.final_year
    pfy = record.pre_final_year_internships
    hs = record.pre_final_year_high_salary
    return [
        record.date,
        fy.offers_received,
        fy.total_since_april,
        fy.remarks,
        fy.unplaced.college_a,
        fy.unplaced.college_b,
        fy.awaited_results,
        pfy.offers_today,
        pfy.total_since_april,
        pfy.remarks,
        hs.offers_today,
        hs.total_since_april,
        hs.remarks,
    ]


def group_by_reporter(records: Sequence[ReportRecord]) -> Dict[str, List[ReportRecord]]:
    """Reports per reporter; dict order is order of first appearance"""
    groups: Dict[str, List[ReportRecord]] = {}
    for record in records:
        groups.setdefault(record.reported_by, []).append(record)
    return groups


def sheet_title(name: str, taken: Set[str]) -> str:
    """Excel-safe, unique (case-insensitive) worksheet title; registers it in ``taken``"""
    base = _INVALID_TITLE_CHARS.sub("", name).strip().strip("'") or "Unknown"
    base = base[:MAX_SHEET_TITLE]

    title = base
    counter = 2
    while title.lower() in taken:
        suffix = f" {counter}"
        title = base[:MAX_SHEET_TITLE - len(suffix)] + suffix
        counter += 1

    taken.add(title.lower())
    return title


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def _fill_sheet(sheet, records: Sequence[ReportRecord], headers: List[str]) -> None:
    sheet.append(headers)
    for cell in sheet[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL

    for record in records:
        sheet.append([_clean(value) for value in export_row(record)])

    for index, header in enumerate(headers, start=1):
        sheet.column_dimensions[sheet.cell(row=1, column=index).column_letter].width = max(12, len(header) + 2)


def build_workbook(records: Sequence[ReportRecord],
                   college_a: str = "SNSCE",
                   college_b: str = "SNSCT") -> Workbook:
    """Workbook with a sheet per reporter plus the All Reports sheet"""
    if not records:
        raise ExportError("No reports to export")

    headers = export_headers(college_a, college_b)
    workbook = Workbook()
    workbook.remove(workbook.active)

    taken = {ALL_REPORTS_SHEET.lower()}
    for reporter, reports in group_by_reporter(records).items():
        sheet = workbook.create_sheet(title=sheet_title(reporter, taken))
        _fill_sheet(sheet, reports, headers)

    _fill_sheet(workbook.create_sheet(title=ALL_REPORTS_SHEET), records, headers)
    return workbook


def export_filename(today: Optional[date] = None) -> str:
    return f"placement_reports_{(today or date.today()).isoformat()}.xlsx"


def export_reports(records: Sequence[ReportRecord],
                   directory: str = ".",
                   today: Optional[date] = None,
                   college_a: str = "SNSCE",
                   college_b: str = "SNSCT") -> Path:
    """Write the workbook and return its path"""
    workbook = build_workbook(records, college_a, college_b)

    path = Path(directory) / export_filename(today)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(path)
    except OSError as e:
        raise ExportError(f"Could not write {path}: {e}", details={"path": str(path)}) from e

    logger.info(f"Exported {len(records)} reports to {path}")
    return path

"""
Report snapshot and sharing.

A single report is rendered to ``placement-report-<date>.png`` and shared
with a text summary. When no native share hook is available, or it fails,
the image stays on disk and a WhatsApp link with the pre-filled summary is
opened instead. Rendering or browser problems never raise; the text summary
always gets through.
"""

import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from urllib.parse import quote

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from placement_tracker.logging_config import logger
from placement_tracker.models import ReportRecord


REPORT_TITLE = "Placement & Internship Daily Report"
WHATSAPP_URL = "https://wa.me/?text="

NativeShare = Callable[[Path, str], None]


@dataclass
class ShareResult:
    method: str  # "native" or "link"
    message: str
    image_path: Optional[Path] = None
    link: Optional[str] = None


def image_filename(record: ReportRecord) -> str:
    return f"placement-report-{record.date}.png"


def summary_message(record: ReportRecord, college_a: str = "SNSCE", college_b: str = "SNSCT") -> str:
    """Human-readable summary with the same fields as a spreadsheet row"""
    fy = record.final_year
    pfy = record.pre_final_year_internships
    hs = record.pre_final_year_high_salary

    lines = [
        f"*{REPORT_TITLE}*",
        f"*Date:* {record.date}",
        f"*Reported By:* {record.reported_by}",
        "",
        "*Final Year Placement Updates:*",
        f"- Offers Received: {fy.offers_received}",
        f"- Total Since April: {fy.total_since_april}",
    ]
    if fy.remarks:
        lines.append(f"- Remarks: {fy.remarks}")
    lines += [
        f"- Unplaced ({college_a}): {fy.unplaced.college_a}",
        f"- Unplaced ({college_b}): {fy.unplaced.college_b}",
        f"- Awaited Results: {fy.awaited_results}",
        "",
        "*Pre-Final Year Internships:*",
        f"- Offers Today: {pfy.offers_today}",
        f"- Total Since April: {pfy.total_since_april}",
    ]
    if pfy.remarks:
        lines.append(f"- Remarks: {pfy.remarks}")
    lines += [
        "",
        "*Pre-Final Year High Salary (10 LPA+):*",
        f"- Offers Today: {hs.offers_today}",
        f"- Total Since April: {hs.total_since_april}",
    ]
    if hs.remarks:
        lines.append(f"- Remarks: {hs.remarks}")

    return "\n".join(lines)


def whatsapp_link(message: str) -> str:
    return WHATSAPP_URL + quote(message, safe="")


def _report_rows(record: ReportRecord, college_a: str, college_b: str) -> List[Tuple[str, str]]:
    fy = record.final_year
    pfy = record.pre_final_year_internships
    hs = record.pre_final_year_high_salary
    rows = [
        ("Date", record.date),
        ("Reported By", record.reported_by),
        ("FY Offers Received", fy.offers_received),
        ("FY Total Since April", fy.total_since_april),
        ("FY Remarks", fy.remarks),
        (f"Unplaced ({college_a})", str(fy.unplaced.college_a)),
        (f"Unplaced ({college_b})", str(fy.unplaced.college_b)),
        ("Awaited Results", fy.awaited_results),
        ("PFY Offers Today", pfy.offers_today),
        ("PFY Total Since April", str(pfy.total_since_april)),
        ("PFY Remarks", pfy.remarks),
        ("High Salary Offers Today", hs.offers_today),
        ("High Salary Total Since April", hs.total_since_april),
        ("High Salary Remarks", hs.remarks),
    ]
    for item in record.internship_updates:
        rows.append((
            f"Internship: {item.company}",
            f"{item.department} · {item.number_of_students} students · {item.status}",
        ))
    return rows


def render_report_image(record: ReportRecord, directory: str = ".",
                        college_a: str = "SNSCE", college_b: str = "SNSCT") -> Path:
    """Render one report as a PNG table"""
    rows = _report_rows(record, college_a, college_b)
    path = Path(directory) / image_filename(record)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(10, 0.4 * len(rows) + 1.2))
    try:
        ax.axis("off")
        table = ax.table(cellText=[[label, value or "-"] for label, value in rows],
                         colLabels=["Field", "Value"], colWidths=[0.35, 0.65],
                         cellLoc="left", loc="upper center")
        table.auto_set_font_size(False)
        table.set_fontsize(10)
        table.scale(1, 1.4)
        for (row, _), cell in table.get_celld().items():
            if row == 0:
                cell.set_facecolor("#1E40AF")
                cell.get_text().set_color("white")
                cell.get_text().set_fontweight("bold")

        ax.set_title(REPORT_TITLE, fontsize=14, fontweight="bold", pad=12)
        fig.savefig(path, dpi=150, bbox_inches="tight", facecolor="white")
    finally:
        plt.close(fig)

    return path


def share_report(record: ReportRecord,
                 directory: str = ".",
                 native_share: Optional[NativeShare] = None,
                 opener: Callable[[str], object] = webbrowser.open,
                 college_a: str = "SNSCE",
                 college_b: str = "SNSCT") -> ShareResult:
    """Share via the native hook when possible, otherwise image on disk + WhatsApp link"""
    message = summary_message(record, college_a, college_b)

    image_path: Optional[Path] = None
    try:
        image_path = render_report_image(record, directory, college_a, college_b)
    except Exception as e:
        logger.warning(f"Could not render report image: {type(e).__name__}: {e}")

    if native_share is not None and image_path is not None:
        try:
            native_share(image_path, message)
            return ShareResult(method="native", message=message, image_path=image_path)
        except Exception as e:
            logger.debug(f"Native share unavailable, using link fallback: {e}")

    link = whatsapp_link(message)
    try:
        opener(link)
    except Exception as e:
        logger.warning(f"Could not open browser: {e}")

    return ShareResult(method="link", message=message, image_path=image_path, link=link)

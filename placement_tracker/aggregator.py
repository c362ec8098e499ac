"""
Report Aggregator
=================

Pure functions that derive dashboard statistics and chart series from a
collection of report records. Nothing here raises on bad input: offer counts
are free text and parse leniently, an empty collection yields zeros.

Offer totals are cumulative across records. The unplaced figure is a
snapshot and always comes from the latest-dated record.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from placement_tracker.models import ReportRecord


DEFAULT_CHART_WINDOW = 7
DEFAULT_RECENT_WINDOW = 5

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def parse_count(value: Any) -> int:
    """
    Parse an offer count the way the web form did (``parseInt(x) || 0``).

    The leading run of digits wins, anything unparseable is 0:
        "3" -> 3, " 12 offers" -> 12, "2.9" -> 2, "x" -> 0, "" -> 0
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0

    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


@dataclass
class ReportSummary:
    """Dashboard stat cards"""
    total_fy_offers: int = 0
    total_pfy_offers: int = 0
    total_high_salary_offers: int = 0
    total_unplaced: int = 0
    latest_date: str = ""
    latest_report: Optional["ReportRecord"] = None


@dataclass
class ChartSeries:
    """Parallel series for the offers, unplaced and trend charts"""
    dates: List[str] = field(default_factory=list)
    fy_offers: List[int] = field(default_factory=list)
    pfy_offers: List[int] = field(default_factory=list)
    high_salary_offers: List[int] = field(default_factory=list)
    fy_total_since_april: List[int] = field(default_factory=list)
    unplaced_by_college: Tuple[int, int] = (0, 0)

    def __len__(self) -> int:
        return len(self.dates)


def latest_report(records: Sequence["ReportRecord"]) -> Optional["ReportRecord"]:
    """Record with the greatest date; on a tie the first one seen wins"""
    latest = None
    for record in records:
        if latest is None or record.date > latest.date:
            latest = record
    return latest


def summarize(records: Sequence["ReportRecord"]) -> ReportSummary:
    """Compute the summary cards for a collection of reports"""
    summary = ReportSummary()

    for record in records:
        summary.total_fy_offers += parse_count(record.final_year.offers_received)
        summary.total_pfy_offers += parse_count(record.pre_final_year_internships.offers_today)
        summary.total_high_salary_offers += parse_count(record.pre_final_year_high_salary.offers_today)

    latest = latest_report(records)
    if latest is not None:
        summary.latest_date = latest.date
        summary.latest_report = latest
        summary.total_unplaced = latest.final_year.unplaced.total

    return summary


def sort_by_date(records: Iterable["ReportRecord"], descending: bool = False) -> List["ReportRecord"]:
    """Stable sort on the ISO date string"""
    return sorted(records, key=lambda r: r.date, reverse=descending)


def build_chart_series(records: Sequence["ReportRecord"],
                       window: int = DEFAULT_CHART_WINDOW) -> ChartSeries:
    """Series for the last ``window`` days of reports, oldest first"""
    ordered = sort_by_date(records)
    recent = ordered[-window:] if window > 0 else []

    series = ChartSeries(
        dates=[r.date for r in recent],
        fy_offers=[parse_count(r.final_year.offers_received) for r in recent],
        pfy_offers=[parse_count(r.pre_final_year_internships.offers_today) for r in recent],
        high_salary_offers=[parse_count(r.pre_final_year_high_salary.offers_today) for r in recent],
        fy_total_since_april=[parse_count(r.final_year.total_since_april) for r in recent],
    )

    latest = latest_report(records)
    if latest is not None:
        unplaced = latest.final_year.unplaced
        series.unplaced_by_college = (unplaced.college_a, unplaced.college_b)

    return series


def filter_by_date(records: Sequence["ReportRecord"], date: Optional[str]) -> List["ReportRecord"]:
    """Exact match on ``date``; a blank filter keeps everything"""
    if not date:
        return list(records)
    return [r for r in records if r.date == date]


def recent_reports(records: Sequence["ReportRecord"],
                   limit: Optional[int] = DEFAULT_RECENT_WINDOW,
                   date_filter: Optional[str] = None) -> List["ReportRecord"]:
    """Newest first, optionally filtered; ``limit=None`` returns all"""
    ordered = sort_by_date(filter_by_date(records, date_filter), descending=True)
    if limit is None:
        return ordered
    return ordered[:limit]

"""
Dashboard chart images.

Three panels in one PNG, mirroring the dashboard:
  1. daily offers (final year, pre-final year, high salary) as grouped bars
  2. unplaced students by college from the latest report
  3. final year total-since-April trend
"""

from datetime import date
from pathlib import Path
from typing import Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from placement_tracker.aggregator import ChartSeries
from placement_tracker.exceptions import ExportError
from placement_tracker.logging_config import logger


BAR_COLORS = ("#3B82F6", "#22C55E", "#EAB308")
PIE_COLORS = ("#EF4444", "#F97316")
TREND_COLOR = "#FF6384"


def chart_filename(today: Optional[date] = None) -> str:
    return f"placement_charts_{(today or date.today()).isoformat()}.png"


def render_dashboard_charts(series: ChartSeries,
                            directory: str = ".",
                            today: Optional[date] = None,
                            college_a: str = "SNSCE",
                            college_b: str = "SNSCT") -> Path:
    """Save the dashboard charts and return the PNG path"""
    if not len(series):
        raise ExportError("No reports to chart")

    path = Path(directory) / chart_filename(today)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, (offers_ax, unplaced_ax, trend_ax) = plt.subplots(1, 3, figsize=(18, 5))
    try:
        positions = range(len(series.dates))
        width = 0.27
        datasets = (
            ("Final Year Offers", series.fy_offers),
            ("Pre-Final Year Offers", series.pfy_offers),
            ("High Salary Offers", series.high_salary_offers),
        )
        for offset, ((label, values), color) in enumerate(zip(datasets, BAR_COLORS)):
            offers_ax.bar([p + (offset - 1) * width for p in positions], values,
                          width=width, label=label, color=color)
        offers_ax.set_xticks(list(positions))
        offers_ax.set_xticklabels(series.dates, rotation=45, ha="right")
        offers_ax.set_title(f"Daily Offers (Last {len(series)} Reports)", fontweight="bold")
        offers_ax.legend(loc="upper left")

        unplaced = list(series.unplaced_by_college)
        if sum(unplaced) > 0:
            unplaced_ax.pie(unplaced, labels=[college_a, college_b], colors=PIE_COLORS,
                            autopct=lambda pct: f"{round(pct * sum(unplaced) / 100)}")
        else:
            unplaced_ax.text(0.5, 0.5, "No unplaced students", ha="center", va="center")
            unplaced_ax.axis("off")
        unplaced_ax.set_title("Unplaced Students by College", fontweight="bold")

        trend_ax.plot(list(positions), series.fy_total_since_april, marker="o", color=TREND_COLOR,
                      label="FY Total Placements")
        trend_ax.fill_between(list(positions), series.fy_total_since_april, alpha=0.2, color=TREND_COLOR)
        trend_ax.set_xticks(list(positions))
        trend_ax.set_xticklabels(series.dates, rotation=45, ha="right")
        trend_ax.set_ylim(bottom=0)
        trend_ax.set_title("Placement Trend (Total Since April)", fontweight="bold")
        trend_ax.legend(loc="upper left")

        fig.tight_layout()
        fig.savefig(path, dpi=150, bbox_inches="tight", facecolor="white")
    finally:
        plt.close(fig)

    logger.info(f"Dashboard charts saved to {path}")
    return path

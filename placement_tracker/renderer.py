"""
Report Renderer - terminal views of reports and dashboard statistics

Views:
- stat cards (offers totals, latest unplaced count)
- full report table with optional date filter
- dashboard (cards, last-7-days series, recent reports)
- single report detail
- draft form with field errors
"""

from typing import Dict, List, Optional, Sequence, Tuple

from rich.box import ROUNDED, SIMPLE
from rich.columns import Columns
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from placement_tracker.aggregator import ChartSeries, ReportSummary
from placement_tracker.config import TrackerConfig
from placement_tracker.models import ReportRecord


TableRow = Tuple[str, str, str, str]

NO_REPORTS = "No reports available"


def table_rows(records: Sequence[ReportRecord]) -> List[TableRow]:
    """Date, Reported By, FY Offers, PFY Offers; blank offers display as 0"""
    return [
        (
            r.date,
            r.reported_by,
            r.final_year.offers_received or "0",
            r.pre_final_year_internships.offers_today or "0",
        )
        for r in records
    ]


def stat_cards(summary: ReportSummary) -> List[Tuple[str, int, str]]:
    """(title, value, caption) for each dashboard card"""
    return [
        ("Final Year Offers", summary.total_fy_offers, ""),
        ("PFY Internships", summary.total_pfy_offers, ""),
        ("High Salary Offers", summary.total_high_salary_offers, ""),
        ("Unplaced Students", summary.total_unplaced, "Latest count"),
    ]


class ReportRenderer:
    """Renders reports in the terminal with rich formatting"""

    CARD_COLORS = ("blue", "green", "yellow", "red")

    def __init__(self, console: Console, config: Optional[TrackerConfig] = None):
        self.console = console
        self.college_a = config.college_a_label if config else "SNSCE"
        self.college_b = config.college_b_label if config else "SNSCT"

    def render_empty(self):
        self.console.print(Panel(
            f"[dim]{NO_REPORTS}[/dim]\n[dim]Submit a report to see data here[/dim]",
            border_style="dim"
        ))

    def render_error(self, message: str):
        self.console.print(f"[red]✗ {escape(message)}[/red]")

    def render_stats(self, summary: ReportSummary):
        """Summary cards"""
        panels = []
        for (title, value, caption), color in zip(stat_cards(summary), self.CARD_COLORS):
            body = f"[bold]{value}[/bold]"
            if caption:
                body += f"\n[dim]{caption}[/dim]"
            panels.append(Panel(body, title=title, border_style=color, box=ROUNDED, width=24))
        self.console.print(Columns(panels))

    def _reports_table(self, records: Sequence[ReportRecord], title: str) -> Table:
        table = Table(title=title, show_header=True, header_style="bold white on blue")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Date")
        table.add_column("Reported By")
        table.add_column("FY Offers", justify="right")
        table.add_column("PFY Offers", justify="right")

        for index, row in enumerate(table_rows(records), start=1):
            table.add_row(str(index), *(Text(value) for value in row))
        return table

    def render_reports_table(self, records: Sequence[ReportRecord], date_filter: Optional[str] = None):
        """Full table view, newest first"""
        if not records:
            if date_filter:
                self.console.print(f"[dim]No reports for {escape(date_filter)}[/dim]")
            else:
                self.render_empty()
            return

        title = f"Reports for {escape(date_filter)}" if date_filter else "All Reports"
        self.console.print(self._reports_table(records, title))

    def render_chart_series(self, series: ChartSeries):
        """Last days of offers as a table with inline bars"""
        if not len(series):
            return

        peak = max(series.fy_offers + series.pfy_offers + series.high_salary_offers + [1])

        table = Table(title="Offers (last reports)", box=SIMPLE, show_header=True, header_style="bold")
        table.add_column("Date")
        table.add_column("FY", justify="right")
        table.add_column("PFY", justify="right")
        table.add_column("High Salary", justify="right")
        table.add_column("FY Since April", justify="right")
        table.add_column("")

        for i, day in enumerate(series.dates):
            bar = Text()
            bar.append("█" * round(10 * max(series.fy_offers[i], 0) / peak), style="blue")
            bar.append("█" * round(10 * max(series.pfy_offers[i], 0) / peak), style="green")
            bar.append("█" * round(10 * max(series.high_salary_offers[i], 0) / peak), style="yellow")
            table.add_row(
                Text(day),
                str(series.fy_offers[i]),
                str(series.pfy_offers[i]),
                str(series.high_salary_offers[i]),
                str(series.fy_total_since_april[i]),
                bar,
            )

        unplaced_a, unplaced_b = series.unplaced_by_college
        self.console.print(table)
        self.console.print(
            f"[bold]Unplaced by college:[/bold] {escape(self.college_a)} {unplaced_a}  ·  "
            f"{escape(self.college_b)} {unplaced_b}"
        )

    def render_dashboard(self, records: Sequence[ReportRecord], summary: ReportSummary,
                         series: ChartSeries, recent: Sequence[ReportRecord]):
        if not records:
            self.render_empty()
            return

        self.render_stats(summary)
        self.render_chart_series(series)
        self.console.print(self._reports_table(recent, "Recent Reports"))

    def render_detail(self, record: ReportRecord):
        """Everything in one report"""
        fy = record.final_year
        pfy = record.pre_final_year_internships
        hs = record.pre_final_year_high_salary

        info = Table.grid(padding=(0, 2))
        info.add_row("[dim]Date[/dim]", Text(record.date), "[dim]Reported By[/dim]", Text(record.reported_by))

        fy_table = Table(box=SIMPLE, header_style="bold")
        for column in ("Category", "Today", "Total Since April", "Remarks"):
            fy_table.add_column(column)
        fy_table.add_row(
            "Offers Received", Text(fy.offers_received), Text(fy.total_since_april), Text(fy.remarks)
        )

        unplaced = Text.from_markup(
            f"[bold]Unplaced Students Count:[/bold] "
            f"{escape(self.college_a)}: {fy.unplaced.college_a}   {escape(self.college_b)}: {fy.unplaced.college_b}"
        )
        awaited = Text.from_markup("[bold]Awaited Results:[/bold] ")
        awaited.append(fy.awaited_results)

        pfy_table = Table(box=SIMPLE, header_style="bold")
        for column in ("Today", "Total Since April", "Remarks"):
            pfy_table.add_column(column)
        pfy_table.add_row(Text(pfy.offers_today), str(pfy.total_since_april), Text(pfy.remarks))

        hs_table = Table(box=SIMPLE, header_style="bold")
        for column in ("Today", "Total Since April", "Remarks"):
            hs_table.add_column(column)
        hs_table.add_row(Text(hs.offers_today), Text(hs.total_since_april), Text(hs.remarks))

        if record.internship_updates:
            internships = Table(box=SIMPLE, header_style="bold")
            for column in ("Company", "Department", "No. of Students", "Status"):
                internships.add_column(column)
            for item in record.internship_updates:
                internships.add_row(
                    Text(item.company), Text(item.department), str(item.number_of_students), Text(item.status)
                )
        else:
            internships = Text("No internship updates available", style="italic dim")

        self.console.print(Panel(
            Group(
                info,
                Text("\nFinal Year Placement Updates", style="bold cyan"),
                fy_table, unplaced, awaited,
                Text("\nPre-Final Year Internships", style="bold cyan"),
                pfy_table,
                Text("Pre-Final Year – High Salary (10 LPA+) Opportunities", style="bold cyan"),
                hs_table,
                Text("Internship Updates", style="bold cyan"),
                internships,
            ),
            title=f"[bold]Report Details - {escape(record.date)}[/bold]",
            border_style="cyan"
        ))

    def render_draft(self, record: ReportRecord, errors: Dict[str, str]):
        """Draft form with the editable path of every field"""
        table = Table(title="Daily Report (draft)", show_header=True, header_style="bold cyan")
        table.add_column("Field path", style="dim")
        table.add_column("Value")
        table.add_column("")

        fy = record.final_year
        rows = [
            ("date", record.date),
            ("reported_by", record.reported_by),
            ("final_year.offers_received", fy.offers_received),
            ("final_year.total_since_april", fy.total_since_april),
            ("final_year.remarks", fy.remarks),
            ("final_year.unplaced.college_a", str(fy.unplaced.college_a)),
            ("final_year.unplaced.college_b", str(fy.unplaced.college_b)),
            ("final_year.awaited_results", fy.awaited_results),
            ("pre_final_year_internships.offers_today", record.pre_final_year_internships.offers_today),
            ("pre_final_year_internships.total_since_april",
             str(record.pre_final_year_internships.total_since_april)),
            ("pre_final_year_internships.remarks", record.pre_final_year_internships.remarks),
            ("pre_final_year_high_salary.offers_today", record.pre_final_year_high_salary.offers_today),
            ("pre_final_year_high_salary.total_since_april",
             record.pre_final_year_high_salary.total_since_april),
            ("pre_final_year_high_salary.remarks", record.pre_final_year_high_salary.remarks),
        ]
        for index, item in enumerate(record.internship_updates):
            prefix = f"internship_updates.{index}"
            rows.extend([
                (f"{prefix}.company", item.company),
                (f"{prefix}.department", item.department),
                (f"{prefix}.number_of_students", str(item.number_of_students)),
                (f"{prefix}.status", item.status),
            ])

        for path, value in rows:
            error = errors.get(path)
            table.add_row(path, Text(value), Text(error, style="red") if error else "")

        self.console.print(table)

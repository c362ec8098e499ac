"""
Placement Tracker - Interactive Workspaces

The signed-in role is resolved once into one of two workspaces:

    AdminWorkspace     dashboard, report table with date filter, detail view,
                       spreadsheet export, chart images, refresh
    ReporterWorkspace  daily report form, submit, reset, share, saved reports

Both run a prompt_toolkit shell with file-backed history. Commands are plain
words (``help`` lists them); every command is also callable directly through
``handle()``.
"""

import asyncio
import inspect
import shlex
import webbrowser
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.table import Table

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.formatted_text.html import html_escape
from prompt_toolkit.history import FileHistory
from prompt_toolkit.styles import Style

from placement_tracker.aggregator import (
    ChartSeries,
    ReportSummary,
    build_chart_series,
    recent_reports,
    sort_by_date,
    summarize,
)
from placement_tracker.api_client import PlacementAPIClient
from placement_tracker.charts import render_dashboard_charts
from placement_tracker.config import TrackerConfig
from placement_tracker.exceptions import (
    ExportError,
    InvalidFieldPathError,
    NotAuthenticatedError,
    ReportStoreError,
)
from placement_tracker.export import export_reports
from placement_tracker.form import FormController
from placement_tracker.logging_config import logger
from placement_tracker.models import ReportRecord
from placement_tracker.renderer import ReportRenderer
from placement_tracker.session import SessionContext
from placement_tracker.share import ShareResult, share_report


PROMPT_STYLE = Style.from_dict({
    'prompt': '#00D9FF bold',
    'user': '#4ADE80',
    'role': '#FF79C6',
})

# (path, label) in the order the guided form asks for them
FILL_FIELDS = (
    ("date", "Date (YYYY-MM-DD)"),
    ("final_year.offers_received", "Final year offers received today"),
    ("final_year.total_since_april", "Final year total since April"),
    ("final_year.remarks", "Final year remarks"),
    ("final_year.unplaced.college_a", "Unplaced students ({college_a})"),
    ("final_year.unplaced.college_b", "Unplaced students ({college_b})"),
    ("final_year.awaited_results", "Awaited results"),
    ("pre_final_year_internships.offers_today", "Pre-final year internship offers today"),
    ("pre_final_year_internships.total_since_april", "Pre-final year internships since April"),
    ("pre_final_year_internships.remarks", "Pre-final year internship remarks"),
    ("pre_final_year_high_salary.offers_today", "High salary (10 LPA+) offers today"),
    ("pre_final_year_high_salary.total_since_april", "High salary offers since April"),
    ("pre_final_year_high_salary.remarks", "High salary remarks"),
)
INTERNSHIP_FIELDS = (
    ("company", "Company"),
    ("department", "Department"),
    ("number_of_students", "No. of students"),
    ("status", "Status"),
)


class Workspace:
    """Shared shell loop; subclasses register their commands in ``commands()``"""

    role = ""

    def __init__(self, session: SessionContext, client: PlacementAPIClient,
                 config: TrackerConfig, console: Optional[Console] = None):
        self.session = session
        self.client = client
        self.config = config
        self.console = console or Console()
        self.renderer = ReportRenderer(self.console, config)
        self._running = True

    def commands(self) -> Dict[str, Callable]:
        return {
            "help": self.cmd_help,
            "logout": self.cmd_logout,
            "quit": self.cmd_quit,
            "exit": self.cmd_quit,
        }

    # ==================== Shell ====================

    def _get_prompt_text(self) -> HTML:
        user = self.session.user.username if self.session.user else "?"
        return HTML(f'<prompt>❯</prompt> <user>{html_escape(user)}</user> <role>({self.role})</role> ')

    async def start(self) -> None:
        """Hook run before the first prompt"""

    async def run(self) -> None:
        """Run the interactive shell until quit or logout"""
        await self.start()

        prompt_session = PromptSession(
            history=FileHistory(self.config.history_file),
            auto_suggest=AutoSuggestFromHistory(),
            completer=WordCompleter(sorted(self.commands())),
            style=PROMPT_STYLE,
        )
        self.console.print("[dim]Type [bold]help[/bold] for commands, [bold]quit[/bold] to exit[/dim]\n")

        while self._running:
            try:
                line = await asyncio.get_event_loop().run_in_executor(
                    None,
                    lambda: prompt_session.prompt(self._get_prompt_text())
                )
            except KeyboardInterrupt:
                continue
            except EOFError:
                break

            await self.handle(line)

    async def handle(self, line: str) -> bool:
        """Run one command line; returns False once the shell should stop"""
        try:
            words = shlex.split(line)
        except ValueError as e:
            self.renderer.render_error(f"Could not parse input: {e}")
            return self._running

        if not words:
            return self._running

        name, args = words[0].lower(), words[1:]
        command = self.commands().get(name)
        if command is None:
            self.renderer.render_error(f"Unknown command: {name} (try 'help')")
            return self._running

        try:
            inspect.signature(command).bind(*args)
        except TypeError:
            self.renderer.render_error(f"Wrong arguments for '{name}' (try 'help')")
            return self._running

        try:
            result = command(*args)
            if asyncio.iscoroutine(result):
                await result
        except ReportStoreError as e:
            self.renderer.render_error(e.message)
        except (ExportError, InvalidFieldPathError) as e:
            self.renderer.render_error(e.message)

        return self._running

    # ==================== Common commands ====================

    def cmd_help(self):
        table = Table(title="Commands", show_header=True, header_style="bold cyan")
        table.add_column("Command", style="cyan")
        table.add_column("Description")
        for name, command in self.commands().items():
            table.add_row(name, (command.__doc__ or "").strip())
        self.console.print(table)

    def cmd_logout(self):
        """Forget the stored login and leave"""
        self.session.logout()
        self.console.print("[green]✓ Logged out[/green]")
        self._running = False

    def cmd_quit(self):
        """Leave the shell"""
        self._running = False


class AdminWorkspace(Workspace):
    """All submitted reports with dashboard statistics"""

    role = "admin"

    def __init__(self, session: SessionContext, client: PlacementAPIClient,
                 config: TrackerConfig, console: Optional[Console] = None,
                 today: Optional[date] = None):
        super().__init__(session, client, config, console)
        self.records: List[ReportRecord] = []
        self.date_filter: Optional[str] = None
        self.error: Optional[str] = None
        self.loading = False
        self._today = today

    def commands(self) -> Dict[str, Callable]:
        commands = super().commands()
        commands.update({
            "dashboard": self.cmd_dashboard,
            "table": self.cmd_table,
            "filter": self.cmd_filter,
            "view": self.cmd_view,
            "refresh": self.cmd_refresh,
            "export": self.cmd_export,
            "charts": self.cmd_charts,
        })
        return commands

    # ==================== State ====================

    async def refresh(self) -> List[ReportRecord]:
        """Re-fetch every report; the fetch that finishes last wins"""
        self.loading = True
        try:
            records = await self.client.list_reports()
        except ReportStoreError as e:
            self.error = e.message
            logger.warning(f"Refresh failed: {e.message}")
            return self.records
        finally:
            self.loading = False

        self.records = records
        self.error = None
        return records

    @property
    def summary(self) -> ReportSummary:
        return summarize(self.records)

    @property
    def series(self) -> ChartSeries:
        return build_chart_series(self.records, self.config.chart_window)

    @property
    def recent(self) -> List[ReportRecord]:
        return recent_reports(self.records, self.config.recent_window)

    @property
    def visible(self) -> List[ReportRecord]:
        """Table contents: newest first, narrowed by the date filter"""
        return recent_reports(self.records, limit=None, date_filter=self.date_filter)

    def set_date_filter(self, value: Optional[str]) -> List[ReportRecord]:
        self.date_filter = value or None
        return self.visible

    def export(self) -> Path:
        return export_reports(
            self.records, self.config.export_dir, self._today,
            self.config.college_a_label, self.config.college_b_label
        )

    def charts(self) -> Path:
        return render_dashboard_charts(
            self.series, self.config.export_dir, self._today,
            self.config.college_a_label, self.config.college_b_label
        )

    # ==================== Commands ====================

    async def start(self) -> None:
        await self.cmd_refresh()
        self.cmd_dashboard()

    async def cmd_refresh(self):
        """Fetch the latest reports"""
        with self.console.status("[cyan]Loading reports...[/cyan]"):
            await self.refresh()
        if self.error:
            self.renderer.render_error(self.error)
        else:
            self.console.print(f"[dim]{len(self.records)} reports loaded[/dim]")

    def cmd_dashboard(self):
        """Summary cards, last days of offers and recent reports"""
        self.renderer.render_dashboard(self.records, self.summary, self.series, self.recent)

    def cmd_table(self):
        """All reports, newest first"""
        self.renderer.render_reports_table(self.visible, self.date_filter)

    def cmd_filter(self, value: str = ""):
        """Show only reports for one date (no argument clears)"""
        self.set_date_filter(value)
        self.cmd_table()

    def cmd_view(self, number: str):
        """Full details of report N from the table"""
        visible = self.visible
        if not number.isdigit() or not 1 <= int(number) <= len(visible):
            self.renderer.render_error(f"No report #{number}")
            return
        self.renderer.render_detail(visible[int(number) - 1])

    def cmd_export(self):
        """Write every report to an Excel workbook"""
        path = self.export()
        self.console.print(f"[green]✓ Exported to {escape(str(path))}[/green]")

    def cmd_charts(self):
        """Save the dashboard charts as a PNG"""
        path = self.charts()
        self.console.print(f"[green]✓ Charts saved to {escape(str(path))}[/green]")


class ReporterWorkspace(Workspace):
    """Daily report form for one reporter"""

    role = "reporter"

    def __init__(self, session: SessionContext, client: PlacementAPIClient,
                 config: TrackerConfig, console: Optional[Console] = None,
                 form: Optional[FormController] = None,
                 opener: Optional[Callable[[str], object]] = None):
        super().__init__(session, client, config, console)
        self.form = form or FormController(session.require_user(), session.store, client)
        self.saved: List[ReportRecord] = []
        self.last_submitted: Optional[ReportRecord] = None
        self._opener = opener or webbrowser.open

    def commands(self) -> Dict[str, Callable]:
        commands = super().commands()
        commands.update({
            "show": self.cmd_show,
            "set": self.cmd_set,
            "fill": self.cmd_fill,
            "add": self.cmd_add,
            "remove": self.cmd_remove,
            "submit": self.cmd_submit,
            "reset": self.cmd_reset,
            "share": self.cmd_share,
            "history": self.cmd_history,
            "load": self.cmd_load,
        })
        return commands

    async def start(self) -> None:
        self.form.load()
        self.cmd_show()

    # ==================== Form ====================

    def cmd_show(self):
        """Show the draft with field errors"""
        self.renderer.render_draft(self.form.record, self.form.errors)

    def cmd_set(self, path: str, *value: str):
        """Set one field: set <path> <value>"""
        self.form.update(path, " ".join(value))
        error = self.form.error_for(path)
        if error:
            self.renderer.render_error(f"{path}: {error}")

    def cmd_fill(self):
        """Guided entry of every field"""
        labels = {"college_a": self.config.college_a_label, "college_b": self.config.college_b_label}
        for path, label in FILL_FIELDS:
            self._ask(path, label.format(**labels))

        for index in range(len(self.form.record.internship_updates)):
            self.console.print(f"\n[bold cyan]Internship update {index + 1}[/bold cyan]")
            for name, label in INTERNSHIP_FIELDS:
                self._ask(f"internship_updates.{index}.{name}", label)

        while Confirm.ask("Add another internship update?", default=False, console=self.console):
            self.form.add_internship()
            index = len(self.form.record.internship_updates) - 1
            for name, label in INTERNSHIP_FIELDS:
                self._ask(f"internship_updates.{index}.{name}", label)

        self.cmd_show()

    def _ask(self, path: str, label: str) -> None:
        current = self.form.get(path)
        answer = Prompt.ask(label, default=str(current), console=self.console)
        self.form.update(path, answer)
        error = self.form.error_for(path)
        if error:
            self.renderer.render_error(error)

    def cmd_add(self):
        """Add an internship update"""
        self.form.add_internship()
        self.console.print(f"[dim]{len(self.form.record.internship_updates)} internship updates[/dim]")

    def cmd_remove(self, number: str):
        """Remove internship update N"""
        if not number.isdigit():
            self.renderer.render_error(f"No internship update #{number}")
            return
        self.form.remove_internship(int(number) - 1)
        self.console.print(f"[dim]{len(self.form.record.internship_updates)} internship updates[/dim]")

    def cmd_reset(self):
        """Discard the draft"""
        self.form.reset()
        self.console.print("[yellow]Draft cleared[/yellow]")

    async def cmd_submit(self):
        """Submit the draft"""
        record = self.form.record
        with self.console.status("[cyan]Submitting...[/cyan]"):
            result = await self.form.submit()

        if result.success:
            self.last_submitted = record
            self.console.print(f"[green]✓ {escape(result.message)}[/green]")
            return

        self.renderer.render_error(result.message)
        for path, message in result.errors.items():
            self.console.print(f"  [red]{escape(path)}[/red]: {escape(message)}")

    # ==================== Saved reports ====================

    async def cmd_history(self):
        """List previously submitted reports"""
        with self.console.status("[cyan]Loading reports...[/cyan]"):
            self.saved = sort_by_date(await self.form.saved_reports(), descending=True)
        self.renderer.render_reports_table(self.saved)

    def _saved(self, number: str) -> Optional[ReportRecord]:
        if not number.isdigit() or not 1 <= int(number) <= len(self.saved):
            self.renderer.render_error(f"No saved report #{number} (run 'history' first)")
            return None
        return self.saved[int(number) - 1]

    def cmd_load(self, number: str):
        """Start the draft from saved report N"""
        record = self._saved(number)
        if record is not None:
            self.form.load_from(record)
            self.cmd_show()

    def share(self, record: ReportRecord) -> ShareResult:
        return share_report(
            record, self.config.export_dir,
            opener=self._opener,
            college_a=self.config.college_a_label,
            college_b=self.config.college_b_label,
        )

    def cmd_share(self, number: str = ""):
        """Share the last submitted report, or saved report N"""
        if number:
            record = self._saved(number)
        else:
            record = self.last_submitted or self.form.record
        if record is None:
            return

        result = self.share(record)
        if result.image_path:
            self.console.print(f"[green]✓ Report image saved to {escape(str(result.image_path))}[/green]")
        if result.link:
            self.console.print(f"[dim]Share link:[/dim] {escape(result.link)}")


AnyWorkspace = Union[AdminWorkspace, ReporterWorkspace]


def resolve_workspace(session: SessionContext, client: PlacementAPIClient,
                      config: TrackerConfig, console: Optional[Console] = None) -> AnyWorkspace:
    """Pick the workspace for the signed-in role"""
    user = session.user
    if user is None:
        raise NotAuthenticatedError()

    if user.is_admin:
        return AdminWorkspace(session, client, config, console)
    return ReporterWorkspace(session, client, config, console)

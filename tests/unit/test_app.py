"""
Unit Tests for the Admin and Reporter Workspaces
"""
import asyncio
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio
from prompt_toolkit.formatted_text import to_plain_text

from placement_tracker.app import AdminWorkspace, ReporterWorkspace, resolve_workspace
from placement_tracker.exceptions import NotAuthenticatedError
from placement_tracker.models import UserSession
from placement_tracker.session import SessionContext
from placement_tracker.storage import DRAFT_KEY, SESSION_KEY
from tests.factories import json_body, make_payload, mock_client

REPORTS = [
    make_payload(date='2024-06-01', reported_by='Priya', fy_offers='3', unplaced=(5, 2)),
    make_payload(date='2024-06-02', reported_by='Ravi', fy_offers='x', unplaced=(1, 1)),
    make_payload(date='2024-06-02', reported_by='Priya', fy_offers='2', unplaced=(9, 9)),
]


def serve_reports(request: httpx.Request):
    if request.method == 'GET':
        return httpx.Response(200, json=REPORTS)
    return httpx.Response(201, json={'id': 10})


class TestResolveWorkspace:
    """Test role resolution"""

    def test_admin(self, session_for, admin, config, console):
        """Test admins get the admin workspace"""
        session = session_for(admin, mock_client(serve_reports))

        assert isinstance(resolve_workspace(session, session.client, config, console), AdminWorkspace)

    def test_reporter(self, session_for, reporter, config, console):
        """Test other users get the reporter workspace"""
        session = session_for(reporter, mock_client(serve_reports))

        assert isinstance(resolve_workspace(session, session.client, config, console), ReporterWorkspace)

    def test_signed_out(self, store, config, console, offline_client):
        """Test no workspace without a session"""
        with pytest.raises(NotAuthenticatedError):
            resolve_workspace(SessionContext(store, offline_client), offline_client, config, console)


class TestPrompt:
    """Test the shell prompt"""

    def test_username_with_html_characters(self, session_for, config, console):
        """Test usernames are escaped inside the prompt markup"""
        user = UserSession(id='1', username='<asha & co>', role='user', token='t')
        client = mock_client(serve_reports)
        workspace = ReporterWorkspace(session_for(user, client), client, config, console)

        assert to_plain_text(workspace._get_prompt_text()) == '❯ <asha & co> (user) '


class TestAdminWorkspace:
    """Test dashboard state and commands"""

    @pytest.fixture
    def workspace(self, session_for, admin, config, console):
        client = mock_client(serve_reports)
        return AdminWorkspace(session_for(admin, client), client, config, console)

    @pytest.mark.asyncio
    async def test_refresh_and_summary(self, workspace):
        """Test the fetched reports drive the summary"""
        await workspace.refresh()

        assert len(workspace.records) == 3
        assert workspace.summary.total_fy_offers == 5
        assert workspace.summary.total_unplaced == 2
        assert len(workspace.series) == 3
        assert workspace.error is None

    @pytest.mark.asyncio
    async def test_bracketed_report_text(self, session_for, admin, config, console):
        """Test reports containing markup-like text keep the shell usable"""
        payload = make_payload(date='2024-06-01', reported_by='asha [placement cell]', fy_offers='3 [/]')
        client = mock_client(lambda request: httpx.Response(200, json=[payload]))
        workspace = AdminWorkspace(session_for(admin, client), client, config, console)
        await workspace.refresh()

        assert await workspace.handle('dashboard')
        assert await workspace.handle('table')
        assert await workspace.handle('view 1')
        output = console.export_text()
        assert 'asha [placement cell]' in output
        assert '3 [/]' in output

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_records(self, session_for, admin, config, console):
        """Test a failed refresh reports the error and keeps what was loaded"""
        responses = iter([httpx.Response(200, json=REPORTS), httpx.Response(500, text='down')])
        client = mock_client(lambda request: next(responses))
        workspace = AdminWorkspace(session_for(admin, client), client, config, console)

        await workspace.refresh()
        await workspace.refresh()

        assert len(workspace.records) == 3
        assert workspace.error == 'Server responded with status: 500'
        assert not workspace.loading

    @pytest.mark.asyncio
    async def test_overlapping_refreshes_last_resolved_wins(self, session_for, admin, config, console):
        """Test overlapping refreshes are unguarded: the slower, older fetch overwrites the newer one"""
        calls = []

        async def handler(request: httpx.Request):
            calls.append(request)
            if len(calls) == 1:
                await asyncio.sleep(0.05)
                return httpx.Response(200, json=[make_payload(date='2024-06-01', reported_by='Stale')])
            return httpx.Response(200, json=[make_payload(date='2024-06-02', reported_by='Fresh')])

        client = mock_client(handler)
        workspace = AdminWorkspace(session_for(admin, client), client, config, console)

        await asyncio.gather(workspace.refresh(), workspace.refresh())

        assert len(calls) == 2
        assert [r.reported_by for r in workspace.records] == ['Stale']

    @pytest.mark.asyncio
    async def test_date_filter(self, workspace, console):
        """Test the table narrows to one date and clears again"""
        await workspace.refresh()

        assert [r.reported_by for r in workspace.set_date_filter('2024-06-02')] == ['Ravi', 'Priya']
        assert len(workspace.set_date_filter('')) == 3

        await workspace.handle('filter 2024-06-01')
        assert 'Reports for 2024-06-01' in console.export_text()

    @pytest.mark.asyncio
    async def test_view_command(self, workspace, console):
        """Test detail view by table number"""
        await workspace.refresh()

        await workspace.handle('view 1')
        assert 'Report Details - 2024-06-02' in console.export_text()

        await workspace.handle('view 42')
        assert 'No report #42' in console.export_text()

    @pytest.mark.asyncio
    async def test_export_and_charts(self, workspace, config):
        """Test both artifacts land in the export directory"""
        await workspace.handle('refresh')
        await workspace.handle('export')
        await workspace.handle('charts')

        out = Path(config.export_dir)
        assert len(list(out.glob('placement_reports_*.xlsx'))) == 1
        assert len(list(out.glob('placement_charts_*.png'))) == 1

    @pytest.mark.asyncio
    async def test_export_without_reports(self, workspace, console):
        """Test exporting nothing is reported inline"""
        await workspace.handle('export')

        assert 'No reports to export' in console.export_text()

    @pytest.mark.asyncio
    async def test_shell_errors(self, workspace, console):
        """Test unknown commands and wrong arguments do not stop the shell"""
        assert await workspace.handle('frobnicate') is True
        assert await workspace.handle('view') is True
        assert await workspace.handle('') is True

        output = console.export_text()
        assert 'Unknown command: frobnicate' in output
        assert "Wrong arguments for 'view'" in output

    @pytest.mark.asyncio
    async def test_quit(self, workspace):
        """Test quit stops the shell"""
        assert await workspace.handle('quit') is False


@pytest.fixture
def opener():
    return MagicMock()


@pytest.fixture
def posted():
    """Bodies of every POST the fake server received"""
    return []


@pytest_asyncio.fixture
async def reporter_workspace(session_for, reporter, config, console, opener, posted):
    def handler(request: httpx.Request):
        if request.method == 'POST':
            posted.append(json_body(request))
        return serve_reports(request)

    client = mock_client(handler)
    workspace = ReporterWorkspace(session_for(reporter, client), client, config, console, opener=opener)
    await workspace.start()
    return workspace


class TestReporterWorkspace:
    """Test the form workspace"""

    @pytest.fixture
    def workspace(self, reporter_workspace):
        return reporter_workspace

    async def fill(self, workspace):
        for line in [
            'set final_year.offers_received 2',
            'set final_year.awaited_results None',
            'set pre_final_year_internships.offers_today 1',
            'set pre_final_year_high_salary.offers_today 0',
            'set pre_final_year_high_salary.total_since_april 3',
            'set internship_updates.0.company Zoho',
            'set internship_updates.0.department "Computer Science"',
            'set internship_updates.0.status Ongoing',
        ]:
            await workspace.handle(line)

    @pytest.mark.asyncio
    async def test_set_fields(self, workspace):
        """Test set joins the remaining words into the value"""
        await workspace.handle('set final_year.remarks Two offers pending')

        assert workspace.form.record.final_year.remarks == 'Two offers pending'

    @pytest.mark.asyncio
    async def test_reported_by_cannot_change(self, workspace, reporter):
        """Test the locked field ignores edits"""
        await workspace.handle('set reported_by Mallory')

        assert workspace.form.record.reported_by == reporter.username

    @pytest.mark.asyncio
    async def test_set_errors_are_shown(self, workspace, console):
        """Test bad paths and bad counts are reported inline"""
        await workspace.handle('set nowhere 1')
        await workspace.handle('set final_year.unplaced.college_a lots')

        output = console.export_text()
        assert 'Unknown report field: nowhere' in output
        assert 'Enter a whole number' in output

    @pytest.mark.asyncio
    async def test_add_and_remove_internships(self, workspace):
        """Test internship rows are managed by number"""
        await workspace.handle('add')
        assert len(workspace.form.record.internship_updates) == 2

        await workspace.handle('remove 1')
        assert len(workspace.form.record.internship_updates) == 1

    @pytest.mark.asyncio
    async def test_submit_blocked(self, workspace, console, posted):
        """Test missing fields are listed and nothing is sent"""
        await workspace.handle('submit')

        assert posted == []
        assert 'Please fill in all required fields' in console.export_text()

    @pytest.mark.asyncio
    async def test_submit_and_share(self, workspace, posted, opener, store, config):
        """Test a submitted report can be shared afterwards"""
        await self.fill(workspace)
        await workspace.handle('submit')

        assert len(posted) == 1
        assert posted[0]['InternshipUpdates'][0]['Department'] == 'Computer Science'
        assert not store.exists(DRAFT_KEY)
        assert workspace.last_submitted is not None

        await workspace.handle('share')

        opener.assert_called_once()
        assert opener.call_args[0][0].startswith('https://wa.me/?text=')
        assert (Path(config.export_dir) / f'placement-report-{workspace.last_submitted.date}.png').exists()

    @pytest.mark.asyncio
    async def test_history_and_load(self, workspace, reporter):
        """Test a saved report can seed the draft"""
        await workspace.handle('history')

        assert [r.date for r in workspace.saved] == ['2024-06-02', '2024-06-02', '2024-06-01']

        await workspace.handle('load 3')

        assert workspace.form.record.date == '2024-06-01'
        assert workspace.form.record.final_year.offers_received == '3'
        assert workspace.form.record.reported_by == reporter.username

    @pytest.mark.asyncio
    async def test_load_before_history(self, workspace, console):
        """Test load needs the history list"""
        await workspace.handle('load 1')

        assert "run 'history' first" in console.export_text()

    @pytest.mark.asyncio
    async def test_reset(self, workspace, store):
        """Test reset discards the stored draft"""
        await workspace.handle('set final_year.offers_received 4')
        assert store.exists(DRAFT_KEY)

        await workspace.handle('reset')

        assert not store.exists(DRAFT_KEY)
        assert workspace.form.record.final_year.offers_received == ''

    @pytest.mark.asyncio
    async def test_logout(self, workspace, store):
        """Test logout ends the shell and forgets the session"""
        store.write(SESSION_KEY, {'username': 'someone'})

        assert await workspace.handle('logout') is False
        assert not workspace.session.is_authenticated
        assert not store.exists(SESSION_KEY)

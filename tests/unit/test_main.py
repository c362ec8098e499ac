"""
Unit Tests for the CLI Entry Point
"""
import json
from pathlib import Path

import httpx
import pytest

from placement_tracker import main as cli
from placement_tracker.storage import SESSION_KEY, LocalStore
from placement_tracker.config import TrackerConfig
from tests.factories import make_payload, mock_client


@pytest.fixture
def cli_home(tmp_path, monkeypatch):
    """Point the CLI at a temporary config directory and a fake server"""
    monkeypatch.setenv('PLACEMENT_CONFIG_DIR', str(tmp_path / 'config'))
    monkeypatch.setenv('PLACEMENT_EXPORT_DIR', str(tmp_path / 'out'))

    def handler(request: httpx.Request):
        return httpx.Response(200, json=[make_payload(date='2024-06-01', reported_by='Priya')])

    monkeypatch.setattr(cli, 'PlacementAPIClient', lambda base_url, timeout=None: mock_client(handler))
    return tmp_path


def sign_in(home: Path, role: str) -> None:
    store = LocalStore.from_config(TrackerConfig(config_dir=str(home / 'config')))
    store.write(SESSION_KEY, {'id': '1', 'username': 'asha', 'role': role, 'token': 't'})


def run(argv) -> int:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    return exc_info.value.code


class TestMain:
    """Test subcommands and exit codes"""

    def test_status_signed_out(self, cli_home, capsys):
        """Test status works without a session"""
        assert run(['status']) == 0
        assert 'Not logged in' in capsys.readouterr().out

    def test_requires_login(self, cli_home, capsys):
        """Test workspace commands need a session"""
        assert run(['dashboard']) == 1
        assert 'Authentication required' in capsys.readouterr().out

    def test_admin_only_commands(self, cli_home, capsys):
        """Test reporters cannot export"""
        sign_in(cli_home, 'user')

        assert run(['export']) == 1
        assert 'only available to admins' in capsys.readouterr().out

    def test_export(self, cli_home):
        """Test an admin export writes the workbook"""
        sign_in(cli_home, 'admin')

        assert run(['export']) == 0
        assert len(list((cli_home / 'out').glob('placement_reports_*.xlsx'))) == 1

    def test_export_output_dir_flag(self, cli_home, tmp_path):
        """Test --output-dir overrides the configured directory"""
        sign_in(cli_home, 'admin')

        assert run(['export', '-o', str(tmp_path / 'elsewhere')]) == 0
        assert len(list((tmp_path / 'elsewhere').glob('*.xlsx'))) == 1

    def test_logout(self, cli_home):
        """Test logout removes the stored session"""
        sign_in(cli_home, 'admin')

        assert run(['logout']) == 0
        assert not (cli_home / 'config' / 'user.json').exists()

    def test_config_flag_keeps_environment_precedence(self, cli_home, monkeypatch):
        """Test --config values sit under PLACEMENT_* variables and flags"""
        config_file = cli_home / 'team.json'
        config_file.write_text(json.dumps({'export_dir': 'from-file', 'college_b_label': 'South'}))
        monkeypatch.setenv('PLACEMENT_API_URL', 'http://from-env')

        config = cli.build_config(cli.create_parser().parse_args(['--config', str(config_file), 'status']))

        assert config.export_dir == str(cli_home / 'out')
        assert config.api_base_url == 'http://from-env'
        assert config.college_b_label == 'South'

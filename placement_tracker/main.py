#!/usr/bin/env python3
"""
Placement Tracker CLI - Main Entry Point

Usage:
    placement-tracker                 # Start the workspace for your role
    placement-tracker login           # Login with email and password
    placement-tracker signup          # Create an account
    placement-tracker logout          # Forget the stored login
    placement-tracker status          # Show who is logged in
    placement-tracker dashboard       # Print dashboard statistics (admin)
    placement-tracker export          # Write the Excel workbook (admin)
    placement-tracker charts          # Save the dashboard charts (admin)
"""

import argparse
import asyncio
import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt

from placement_tracker import __version__
from placement_tracker.api_client import PlacementAPIClient
from placement_tracker.app import AdminWorkspace, resolve_workspace
from placement_tracker.config import TrackerConfig
from placement_tracker.exceptions import ExportError, ReportStoreError
from placement_tracker.logging_config import logger, setup_logging
from placement_tracker.session import SessionContext
from placement_tracker.storage import LocalStore


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="placement-tracker",
        description="Placement & Internship daily reports from the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  placement-tracker login                      Login to your account
  placement-tracker                            Open your workspace
  placement-tracker export -o reports/         Export every report (admin)
  placement-tracker dashboard                  Print dashboard statistics (admin)

Workspaces:
  Admins get the dashboard, the report table with a date filter, detail
  view, Excel export and chart images. Reporters get the daily report
  form; drafts are kept between runs until submitted or reset.
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    login_parser = subparsers.add_parser("login", help="Login to the report server")
    login_parser.add_argument("--email", "-e", help="Account email")

    signup_parser = subparsers.add_parser("signup", help="Create an account")
    signup_parser.add_argument("--username", "-u", help="Display name used on reports")
    signup_parser.add_argument("--email", "-e", help="Account email")

    subparsers.add_parser("logout", help="Forget the stored login")
    subparsers.add_parser("status", help="Show authentication status")
    subparsers.add_parser("whoami", help="Show current user info")
    subparsers.add_parser("dashboard", help="Print dashboard statistics (admin)")

    export_parser = subparsers.add_parser("export", help="Export all reports to Excel (admin)")
    export_parser.add_argument("--output-dir", "-o", help="Directory for the workbook")

    charts_parser = subparsers.add_parser("charts", help="Save dashboard charts as PNG (admin)")
    charts_parser.add_argument("--output-dir", "-o", help="Directory for the image")

    parser.add_argument(
        "--server-url",
        type=str,
        help="Report server URL (default: PLACEMENT_API_URL or the hosted backend)"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to config file"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def build_config(args: argparse.Namespace) -> TrackerConfig:
    config = TrackerConfig.load_default(args.config)
    if args.server_url:
        config.api_base_url = args.server_url
    if args.verbose:
        config.verbose = True
    if getattr(args, "output_dir", None):
        config.export_dir = args.output_dir
    return config


async def _login(session: SessionContext, console: Console, email: Optional[str]) -> bool:
    console.print(Panel("[bold cyan]Placement Tracker - Login[/bold cyan]", border_style="cyan"))
    email = email or Prompt.ask("Email", console=console)
    password = Prompt.ask("Password", password=True, console=console)

    with console.status("[cyan]Logging in...[/cyan]"):
        user = await session.login(email, password)

    if user is None:
        console.print(f"\n[red]✗ {escape(session.error)}[/red]")
        return False

    console.print(f"\n[green]✓ Login successful![/green] Welcome, [bold]{escape(user.username)}[/bold]")
    return True


async def _signup(session: SessionContext, console: Console,
                  username: Optional[str], email: Optional[str]) -> bool:
    console.print(Panel("[bold cyan]Placement Tracker - Sign up[/bold cyan]", border_style="cyan"))
    username = username or Prompt.ask("Username", console=console)
    email = email or Prompt.ask("Email", console=console)
    password = Prompt.ask("Password", password=True, console=console)
    confirm = Prompt.ask("Confirm password", password=True, console=console)

    with console.status("[cyan]Creating account...[/cyan]"):
        user = await session.signup(username, email, password, confirm)

    if user is None:
        console.print(f"\n[red]✗ {escape(session.error)}[/red]")
        return False

    console.print(f"\n[green]✓ Account created![/green] Welcome, [bold]{escape(user.username)}[/bold]")
    return True


def show_status(session: SessionContext, console: Console) -> None:
    user = session.user
    if user is None:
        console.print("[yellow]Not logged in[/yellow]")
        if session.error:
            console.print(f"[dim]{escape(session.error)}[/dim]")
        return

    console.print(Panel(
        f"[bold]User:[/bold] {escape(user.username)}\n"
        f"[bold]Email:[/bold] {escape(user.email or '-')}\n"
        f"[bold]Role:[/bold] {user.role.value}",
        title="Logged in",
        border_style="green"
    ))


async def _run_admin_command(workspace: AdminWorkspace, command: str) -> bool:
    await workspace.refresh()
    if workspace.error:
        workspace.renderer.render_error(workspace.error)
        return False

    if command == "dashboard":
        workspace.cmd_dashboard()
    elif command == "export":
        workspace.cmd_export()
    elif command == "charts":
        workspace.cmd_charts()
    return True


def main(argv=None):
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    config = build_config(args)
    setup_logging(level="DEBUG" if config.verbose else config.log_level, log_file=config.log_file)

    console = Console()
    store = LocalStore.from_config(config)
    client = PlacementAPIClient(config.api_base_url, timeout=config.timeout)
    session = SessionContext(store, client)
    session.hydrate()

    try:
        if args.command == "login":
            sys.exit(0 if asyncio.run(_login(session, console, args.email)) else 1)

        elif args.command == "signup":
            sys.exit(0 if asyncio.run(_signup(session, console, args.username, args.email)) else 1)

        elif args.command == "logout":
            session.logout()
            console.print("[green]✓ Logged out[/green]")
            sys.exit(0)

        elif args.command in ("status", "whoami"):
            show_status(session, console)
            sys.exit(0)

        if not session.is_authenticated:
            console.print("\n[red]✗ Authentication required[/red]")
            console.print("\nPlease login first:")
            console.print("  [cyan]placement-tracker login[/cyan]    Login with email and password")
            console.print("  [cyan]placement-tracker signup[/cyan]   Create an account")
            sys.exit(1)

        client.token = session.user.token
        workspace = resolve_workspace(session, client, config, console)

        if args.command in ("dashboard", "export", "charts"):
            if not isinstance(workspace, AdminWorkspace):
                console.print(f"[red]✗ '{args.command}' is only available to admins[/red]")
                sys.exit(1)
            sys.exit(0 if asyncio.run(_run_admin_command(workspace, args.command)) else 1)

        console.print(f"[green]Logged in as:[/green] {escape(session.user.username)}")
        asyncio.run(workspace.run())

    except KeyboardInterrupt:
        console.print("\n\nGoodbye!")
        sys.exit(0)
    except (ReportStoreError, ExportError) as e:
        console.print(f"\n[red]✗ {escape(e.message)}[/red]")
        sys.exit(1)
    except Exception as e:
        logger.log_error_with_context(e, context="cli")
        if config.verbose:
            console.print_exception()
        else:
            console.print(f"\n[red]✗ Error: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()

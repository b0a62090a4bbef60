"""
Web Macro - CLI Entry Point.

Configuration Priority:
    1. CLI arguments (--delay, --login-url, etc.)
    2. Environment variables (WEB_MACRO__EXECUTION__DELAY_BETWEEN_ACCOUNTS_S, etc.)
    3. Config file (config.yaml)

Usage:
    web-macro accounts import emails.txt
    web-macro record "Vote" --url https://example.com/poll
    web-macro run macro_1a2b3c4d5e6f --login-url https://example.com/login
"""

import asyncio
import logging
import signal
from datetime import datetime
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from web_macro import __version__
from web_macro.config import Settings, load_config
from web_macro.engine.orchestrator import ExecutionManager, ExecutionMode, order_accounts
from web_macro.engine.session_manager import SessionManager
from web_macro.exceptions import WebMacroError
from web_macro.models.result import ExecutionResult
from web_macro.recorder import MacroRecorder
from web_macro.reporting import RunSummary, compute_stats
from web_macro.storage import JsonRepository, import_accounts
from web_macro.utils.logging import setup_logging_from_settings

logger = logging.getLogger(__name__)

# Create the CLI app
app = typer.Typer(
    name="web-macro",
    help="Record browser macros and replay them across many accounts",
    add_completion=False,
)
accounts_app = typer.Typer(help="Manage accounts")
macros_app = typer.Typer(help="Manage saved macros")
app.add_typer(accounts_app, name="accounts")
app.add_typer(macros_app, name="macros")

console = Console()

_options: Dict[str, Any] = {"config": None, "verbose": False}


@app.callback()
def main(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """Record browser macros and replay them across many accounts."""
    _options["config"] = config
    _options["verbose"] = verbose


def _load_settings(**overrides: Any) -> Settings:
    try:
        settings = load_config(config_path=_options["config"], **overrides)
    except WebMacroError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    setup_logging_from_settings(settings.logging, verbose=_options["verbose"])
    return settings


def _open_repository(settings: Settings) -> JsonRepository:
    try:
        return JsonRepository(settings.storage.path).load()
    except WebMacroError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)


def _save(repo: JsonRepository) -> None:
    try:
        repo.save()
    except WebMacroError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)


def _format_time(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"


# Accounts

@accounts_app.command("import")
def accounts_import(
    file_path: str = typer.Argument(..., help="Text file with one email per line"),
):
    """
    Import accounts from a text file.
    
    Blank lines and lines without "@" are skipped.
    """
    settings = _load_settings()
    repo = _open_repository(settings)
    
    try:
        accounts = import_accounts(file_path)
    except WebMacroError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise typer.Exit(1)
    
    if not accounts:
        console.print(f"[yellow]⚠ No accounts found in {file_path}[/yellow]")
        raise typer.Exit(1)
    
    added = repo.add_accounts(accounts)
    _save(repo)
    console.print(f"[green]✓ Imported {added} account(s)[/green]")


@accounts_app.command("list")
def accounts_list():
    """List accounts and their counters."""
    settings = _load_settings()
    repo = _open_repository(settings)
    accounts = repo.accounts()
    
    if not accounts:
        console.print("[dim]No accounts. Import some with 'web-macro accounts import FILE'.[/dim]")
        return
    
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("ID")
    table.add_column("Email")
    table.add_column("Status")
    table.add_column("Success", justify="right")
    table.add_column("Failure", justify="right")
    table.add_column("Last used", style="dim")
    
    colors = {"idle": "dim", "running": "blue", "completed": "green", "failed": "red"}
    for account in accounts:
        status = account.status.value
        table.add_row(
            account.id,
            account.email,
            f"[{colors[status]}]{status}[/{colors[status]}]",
            str(account.success_count),
            str(account.failure_count),
            _format_time(account.last_used),
        )
    
    console.print(table)


@accounts_app.command("reset")
def accounts_reset(
    account_ids: Optional[List[str]] = typer.Argument(None, help="Account ids (default: all)"),
):
    """Reset completed and failed accounts back to idle."""
    settings = _load_settings()
    repo = _open_repository(settings)
    changed = repo.reset_accounts(account_ids or None)
    _save(repo)
    console.print(f"[green]✓ Reset {changed} account(s)[/green]")


@accounts_app.command("remove")
def accounts_remove(
    account_id: str = typer.Argument(..., help="Account id"),
):
    """Remove one account."""
    settings = _load_settings()
    repo = _open_repository(settings)
    if not repo.remove_account(account_id):
        console.print(f"[red]✗ No account {account_id}[/red]")
        raise typer.Exit(1)
    _save(repo)
    console.print(f"[green]✓ Removed {account_id}[/green]")


@accounts_app.command("clear")
def accounts_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Remove every account."""
    settings = _load_settings()
    repo = _open_repository(settings)
    if not yes and not typer.confirm("Remove all accounts?"):
        raise typer.Exit(1)
    removed = repo.clear_accounts()
    _save(repo)
    console.print(f"[green]✓ Removed {removed} account(s)[/green]")


# Macros

@macros_app.command("list")
def macros_list():
    """List saved macros."""
    settings = _load_settings()
    repo = _open_repository(settings)
    macros = repo.macros()
    
    if not macros:
        console.print("[dim]No macros. Record one with 'web-macro record NAME --url URL'.[/dim]")
        return
    
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Website", style="dim")
    table.add_column("Actions", justify="right")
    table.add_column("Success", justify="right")
    table.add_column("Last used", style="dim")
    
    for macro in macros:
        table.add_row(
            macro.id,
            macro.name,
            macro.website or "-",
            str(macro.action_count),
            f"{macro.success_rate:.1f}%",
            _format_time(macro.last_used),
        )
    
    console.print(table)


@macros_app.command("show")
def macros_show(
    macro_id: str = typer.Argument(..., help="Macro id"),
):
    """Show the actions of a macro."""
    settings = _load_settings()
    repo = _open_repository(settings)
    macro = repo.get_macro(macro_id)
    if macro is None:
        console.print(f"[red]✗ No macro {macro_id}[/red]")
        raise typer.Exit(1)
    
    console.print(Panel.fit(
        f"[bold blue]{macro.name}[/bold blue]\n"
        f"[dim]Website:[/dim] {macro.website or '-'}\n"
        f"[dim]Created:[/dim] {_format_time(macro.created_at)}\n"
        f"[dim]Success rate:[/dim] {macro.success_rate:.1f}%"
        + (f"\n[dim]Description:[/dim] {macro.description}" if macro.description else ""),
        border_style="blue",
    ))
    
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("#", width=3)
    table.add_column("Type")
    table.add_column("Description", style="dim")
    for i, action in enumerate(macro.actions, 1):
        table.add_row(str(i), action.action_type.value, action.description[:80])
    console.print(table)


@macros_app.command("delete")
def macros_delete(
    macro_id: str = typer.Argument(..., help="Macro id"),
):
    """Delete a macro."""
    settings = _load_settings()
    repo = _open_repository(settings)
    if not repo.remove_macro(macro_id):
        console.print(f"[red]✗ No macro {macro_id}[/red]")
        raise typer.Exit(1)
    _save(repo)
    console.print(f"[green]✓ Deleted {macro_id}[/green]")


# Recording

@app.command()
def record(
    name: str = typer.Argument(..., help="Name for the new macro"),
    url: str = typer.Option(..., "--url", "-u", help="Website to record on"),
    description: str = typer.Option("", "--description", "-d", help="Macro description"),
):
    """
    Record a macro in a visible browser.
    
    Interact with the page, then press Enter in the terminal to save.
    """
    settings = _load_settings(browser={"headless": False})
    repo = _open_repository(settings)
    
    console.print(Panel.fit(
        f"[bold blue]⏺ Recording[/bold blue]\n"
        f"[dim]Macro:[/dim] {name}\n"
        f"[dim]Website:[/dim] {url}",
        border_style="blue",
    ))
    
    try:
        macro = asyncio.run(_record_async(settings, name, url, description))
    except WebMacroError as e:
        console.print(f"\n[red]✗ Error: {e}[/red]")
        raise typer.Exit(1)
    
    if not macro.actions:
        console.print("[yellow]⚠ No actions captured, nothing saved[/yellow]")
        raise typer.Exit(1)
    
    repo.add_macro(macro)
    _save(repo)
    console.print(f"[green]✓ Saved {macro.id} with {macro.action_count} action(s)[/green]")


async def _record_async(settings: Settings, name: str, url: str, description: str):
    recorder = MacroRecorder()
    recorder.on_action(lambda action: console.print(f"  [dim]•[/dim] {action.description}"))
    
    async with SessionManager(settings) as sessions:
        session = await sessions.open()
        await sessions.navigate(session, url)
        await recorder.start(session.page)
        
        console.print("[dim]Interact with the page. Press Enter here to stop recording.[/dim]")
        await asyncio.to_thread(input)
        
        await recorder.stop()
    
    return recorder.to_macro(name, website=url, description=description)


# Execution

@app.command()
def run(
    macro_id: str = typer.Argument(..., help="Macro id to replay"),
    account: Optional[List[str]] = typer.Option(None, "--account", "-a", help="Run only these account ids, in this order"),
    delay: Optional[float] = typer.Option(None, "--delay", help="Seconds between accounts (default: from config)"),
    no_jitter: bool = typer.Option(False, "--no-jitter", help="Do not randomize the delay"),
    login_url: Optional[str] = typer.Option(None, "--login-url", help="Login page URL (default: from config)"),
    password: Optional[str] = typer.Option(None, "--password", help="Shared account password (default: from config)"),
    visible: bool = typer.Option(False, "--visible", "-v", help="Run with visible browser"),
    report: Optional[str] = typer.Option(None, "--report", "-r", help="Write a JSON run report to this path"),
):
    """
    Replay a macro for every account.
    
    Examples:
        web-macro run macro_1a2b3c --login-url https://example.com/login
        web-macro run macro_1a2b3c --account acc_01 --account acc_02 --visible
    """
    overrides: Dict[str, Any] = {}
    if visible:
        overrides["browser"] = {"headless": False}
    execution: Dict[str, Any] = {}
    if delay is not None:
        execution["delay_between_accounts_s"] = delay
    if no_jitter:
        execution["randomize_delay"] = False
    if execution:
        overrides["execution"] = execution
    login: Dict[str, Any] = {}
    if login_url:
        login["login_url"] = login_url
    if password:
        login["password"] = password
    if login:
        overrides["login"] = login
    
    settings = _load_settings(**overrides)
    repo = _open_repository(settings)
    
    macro = repo.get_macro(macro_id)
    if macro is None:
        console.print(f"[red]✗ No macro {macro_id}[/red]")
        raise typer.Exit(1)
    
    accounts = repo.accounts()
    if not accounts:
        console.print("[yellow]⚠ No accounts to run[/yellow]")
        raise typer.Exit(1)
    
    mode = ExecutionMode.SELECTED if account else ExecutionMode(settings.execution.mode)
    total = len(order_accounts(accounts, mode, account))
    
    console.print(Panel.fit(
        f"[bold blue]▶ {macro.name}[/bold blue]\n"
        f"[dim]Website:[/dim] {macro.website or '-'}\n"
        f"[dim]Actions:[/dim] {macro.action_count}\n"
        f"[dim]Accounts:[/dim] {total} ({mode.value})",
        border_style="blue",
    ))
    
    summary = asyncio.run(_run_async(settings, repo, macro, accounts, mode, account))
    
    console.print()
    style = "green" if summary.failed == 0 else "yellow"
    console.print(Panel.fit(
        f"[bold {style}]{summary.state.value.title()}[/bold {style}]\n"
        f"Processed: {summary.processed}/{summary.total_accounts}\n"
        f"Succeeded: {summary.succeeded}  Failed: {summary.failed}\n"
        f"Duration: {summary.duration_seconds:.1f}s",
        border_style=style,
    ))
    
    if report:
        summary.export_json(report)
        console.print(f"[dim]📄 Report written to {report}[/dim]")


async def _run_async(settings, repo, macro, accounts, mode, selected_ids) -> RunSummary:
    started = datetime.now()
    
    async with SessionManager(settings) as sessions:
        manager = ExecutionManager(sessions, settings=settings, repository=repo)
        loop = asyncio.get_running_loop()
        
        def signal_handler(sig, frame):
            console.print("\n[dim]Stopping after the current account...[/dim]")
            # Wake the loop so a pending inter-account delay is cut short
            loop.call_soon_threadsafe(manager.request_stop)
        
        previous_handler = signal.signal(signal.SIGINT, signal_handler)
        try:
            await _run_with_progress(manager, macro, accounts, mode, selected_ids)
        finally:
            signal.signal(signal.SIGINT, previous_handler)
        
        return RunSummary.from_snapshot(macro.id, macro.name, manager.snapshot(), started)


async def _run_with_progress(manager, macro, accounts, mode, selected_ids) -> None:
    emails = {a.id: a.email for a in accounts}
    
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
    ) as progress:
        total = len(order_accounts(accounts, mode, selected_ids))
        task = progress.add_task("Running accounts...", total=total)
        
        def on_result(result: ExecutionResult):
            mark = "[green]✓[/green]" if result.success else "[red]✗[/red]"
            detail = f" [dim]{result.error}[/dim]" if result.error else ""
            progress.console.print(f"  {mark} {emails.get(result.account_id, result.account_id)}{detail}")
            progress.advance(task)
        
        manager.on_result(on_result)
        await manager.start(macro, accounts, mode=mode, selected_ids=selected_ids)


# Monitoring

@app.command()
def stats():
    """Show account statistics and recent activity."""
    settings = _load_settings()
    repo = _open_repository(settings)
    summary = compute_stats(repo.accounts())
    
    console.print(Panel.fit(
        f"[bold blue]📊 Accounts[/bold blue]\n"
        f"Total: {summary.total_accounts}  Running: {summary.active_accounts}\n"
        f"Completed: {summary.completed_accounts}  Failed: {summary.failed_accounts}\n"
        f"Successes: [green]{summary.total_success}[/green]  "
        f"Failures: [red]{summary.total_failures}[/red]\n"
        f"Success rate: {summary.success_rate:.1f}%",
        border_style="blue",
    ))
    
    if summary.recent_activity:
        table = Table(title="Recent Activity", show_header=True, header_style="bold cyan", box=None)
        table.add_column("Email")
        table.add_column("Status")
        table.add_column("Success", justify="right")
        table.add_column("Failure", justify="right")
        table.add_column("Last used", style="dim")
        for account in summary.recent_activity:
            table.add_row(
                account.email,
                account.status.value,
                str(account.success_count),
                str(account.failure_count),
                _format_time(account.last_used),
            )
        console.print(table)
    else:
        console.print("[dim]No recent activity[/dim]")
    
    macros = repo.macros()
    if macros:
        table = Table(title="Macros", show_header=True, header_style="bold cyan", box=None)
        table.add_column("Name")
        table.add_column("Success", justify="right")
        for macro in macros:
            rate = macro.success_rate
            color = "green" if rate >= 80 else "yellow" if rate >= 60 else "red"
            table.add_row(macro.name, f"[{color}]{rate:.1f}%[/{color}]")
        console.print(table)


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]Web Macro[/bold] v{__version__}")


if __name__ == "__main__":
    app()

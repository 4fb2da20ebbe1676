"""
Command-line interface for the Up to YNAB reconciliation tool.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config import load_config, generate_default_config, ReconConfig
from .matching.accounts import resolve_accounts
from .matching.engine import ReconciliationEngine
from .models.results import ReconciliationResult, ReconciliationSummary
from .parsers.run_loader import RunLoader
from .reports.balance import filter_snapshots, format_balance, write_balance_csv
from .reports.excel_generator import ExcelReportGenerator
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging
from .utils.timestamps import parse_iso_datetime

console = Console()

RUN_DIR = click.Path(exists=True, file_okay=False, path_type=Path)
CONFIG_OPTION = click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Reconcile Up bank transactions against a YNAB budget."""
    pass


def _prepare(config: Optional[Path], verbose: bool) -> ReconConfig:
    """Load configuration and configure logging from it."""
    recon_config = load_config(config)
    log_config = recon_config.logging
    setup_logging(
        logging.DEBUG if verbose else log_config.level,
        log_file=Path(log_config.file) if log_config.file else None,
        log_format=log_config.format,
    )
    return recon_config


def _run(recon_config: ReconConfig, run_dir: Path) -> ReconciliationResult:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Loading run...", total=None)
        snapshot = RunLoader(recon_config).read(run_dir)
        progress.update(task, completed=True)

        task = progress.add_task("Running reconciliation...", total=None)
        result = ReconciliationEngine(recon_config).reconcile(snapshot)
        progress.update(task, completed=True)

    return result


def _fail(error: Exception, verbose: bool = False) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    if verbose:
        console.print_exception()
    sys.exit(1)


def _parse_bound(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 bound; naive values are taken as UTC."""
    if value is None:
        return None
    try:
        parsed = parse_iso_datetime(value)
    except ValueError:
        raise click.BadParameter(f"not an ISO 8601 date or time: {value}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@main.command()
@click.argument("run_dir", type=RUN_DIR)
@CONFIG_OPTION
@click.option("--budget-id", default=None, help="Override the YNAB budget to reconcile against")
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--dry-run", is_flag=True, help="Show the summary without generating a report")
def reconcile(
    run_dir: Path,
    config: Optional[Path],
    budget_id: Optional[str],
    output: Optional[Path],
    verbose: bool,
    dry_run: bool,
):
    """
    Reconcile the Up and YNAB records of a run.

    RUN_DIR: Run snapshot directory
    """
    try:
        recon_config = _prepare(config, verbose)
        if budget_id is not None:
            recon_config.sync.budget_id = budget_id

        result = _run(recon_config, run_dir)
        _display_summary(result.summary)
        _display_failures(result)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        if output is None:
            now = datetime.now()
            output = Path(
                recon_config.output.excel.filename_template.format(
                    date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
                )
            )

        report_path = ExcelReportGenerator(recon_config).generate_report(result, output)
        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except ReconciliationError as e:
        _fail(e, verbose)


@main.command()
@click.argument("run_dir", type=RUN_DIR)
@CONFIG_OPTION
@click.option("--budget-id", default=None, help="Override the YNAB budget to reconcile against")
@click.option(
    "--out",
    "out_file",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="File to write the write-back request to (JSON)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def sync(
    run_dir: Path,
    config: Optional[Path],
    budget_id: Optional[str],
    out_file: Path,
    verbose: bool,
):
    """
    Write the YNAB create/update request for a run.

    RUN_DIR: Run snapshot directory
    """
    try:
        recon_config = _prepare(config, verbose)
        if budget_id is not None:
            recon_config.sync.budget_id = budget_id

        result = _run(recon_config, run_dir)
        request = result.write_back

        out_file.parent.mkdir(parents=True, exist_ok=True)
        out_file.write_text(request.model_dump_json(indent=2, exclude_none=True))

        if request.is_empty:
            console.print("[green]YNAB is in sync, nothing to write[/green]")
        console.print(
            f"[green]Wrote {len(request.create)} new and {len(request.update)} "
            f"updated transactions to {out_file}[/green]"
        )

    except ReconciliationError as e:
        _fail(e, verbose)


@main.command()
@click.argument("run_dir", type=RUN_DIR)
@CONFIG_OPTION
@click.option("--since", default=None, help="Only show balances after this ISO date/time")
@click.option("--until", default=None, help="Only show balances before this ISO date/time")
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Write balances to CSV")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def balance(
    run_dir: Path,
    config: Optional[Path],
    since: Optional[str],
    until: Optional[str],
    output: Optional[Path],
    verbose: bool,
):
    """
    Show running account balances for a run.

    RUN_DIR: Run snapshot directory
    """
    since_time = _parse_bound(since)
    until_time = _parse_bound(until)

    try:
        recon_config = _prepare(config, verbose)
        result = _run(recon_config, run_dir)
        snapshots = filter_snapshots(result.balances, since_time, until_time)

        if output is not None:
            write_balance_csv(snapshots, output)
            console.print(f"[green]Balances written: {output}[/green]")
            return

        if not snapshots:
            console.print("[yellow]No transactions in range[/yellow]")
            return
        console.print(escape(format_balance(snapshots[-1])))
        console.print(f"\nTotal transactions: {len(snapshots)}")

    except ReconciliationError as e:
        _fail(e, verbose)


@main.command()
@click.argument("run_dir", type=RUN_DIR)
@CONFIG_OPTION
def accounts(run_dir: Path, config: Optional[Path]):
    """
    Show how the Up accounts of a run resolve to YNAB accounts.

    RUN_DIR: Run snapshot directory
    """
    try:
        recon_config = _prepare(config, False)
        snapshot = RunLoader(recon_config).read(run_dir)
        resolution = resolve_accounts(snapshot.up_accounts, snapshot.ynab_accounts)

        table = Table(title=f"Accounts: {run_dir.name}")
        table.add_column("Name")
        table.add_column("Up ID")
        table.add_column("YNAB ID")
        table.add_column("Transfer Payee ID")

        for account in resolution.accounts:
            table.add_row(
                account.name,
                account.up_id,
                str(account.ynab_id),
                str(account.ynab_transfer_id),
            )
        console.print(table)

        for failure in resolution.failures:
            console.print(
                f"[yellow]Skipped {escape(failure.record_id)}: {escape(failure.reason)}[/yellow]"
            )

        console.print(f"\nResolved accounts: {len(resolution.accounts)}")

    except ReconciliationError as e:
        _fail(e)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _display_summary(summary: Optional[ReconciliationSummary]) -> None:
    """Display reconciliation summary in console."""
    if summary is None:
        return

    table = Table(title=f"Reconciliation Summary: {summary.budget_name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Resolved Accounts", str(summary.resolved_account_count))
    table.add_row("Skipped Accounts", str(summary.skipped_account_count))
    table.add_row("Up Records", str(summary.up_record_count))
    table.add_row("Source Transactions", str(summary.source_transaction_count))
    table.add_row("Matched Transfers", str(summary.matched_transfer_count))
    table.add_row("Unmatched Transfer Legs", str(summary.unmatched_transfer_count))
    table.add_row("Reclassified", str(summary.reclassified_count))
    table.add_row("YNAB Records", str(summary.ynab_record_count))
    table.add_row("Missing in YNAB", str(summary.missing_count))
    table.add_row("Modified in YNAB", str(summary.modified_count))
    table.add_row("Failures", str(summary.failure_count))
    table.add_row("Processing Time", f"{summary.processing_time_seconds:.2f}s")

    console.print(table)
    if summary.in_sync:
        console.print("[green]YNAB is in sync with Up[/green]")


def _display_failures(result: ReconciliationResult) -> None:
    """List records that could not be reconciled."""
    if not result.failures:
        return

    table = Table(title="Failures")
    table.add_column("Source")
    table.add_column("Record ID")
    table.add_column("Reason")

    for failure in result.failures:
        table.add_row(failure.source, escape(failure.record_id), escape(failure.reason))

    console.print(table)


if __name__ == "__main__":
    main()

"""
Excel report generator for reconciliation results.
Creates multi-sheet workbooks with formatted output.
"""

from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Sequence
import logging

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig, SheetConfig
from ..models.results import ReconciliationResult, ReconciliationSummary
from ..models.transaction import Transaction
from ..utils.exceptions import ReportGenerationError
from .balance import balance_frame

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
VARIANCE_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

TRANSACTION_HEADERS = ["Time", "ID", "Amount", "Currency", "Kind", "To", "From", "Message"]


def _cell_value(value: Any) -> Any:
    if pd.isna(value):
        return None
    if isinstance(value, Decimal):
        return float(value)
    return value


def _transaction_row(transaction: Transaction) -> list[Any]:
    return [
        transaction.time.isoformat(),
        transaction.id,
        float(transaction.amount.amount),
        transaction.amount.currency,
        transaction.kind_label,
        transaction.to_name,
        transaction.from_name,
        transaction.message or "",
    ]


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with multiple sheets."""

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config or ReconConfig()
        self.sheet_config = self.config.output.sheets

    def generate_report(self, result: ReconciliationResult, output_path: Path) -> Path:
        """
        Generate the complete reconciliation report.

        Args:
            result: Result of a reconciliation run
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        sheets = self.sheet_config
        if sheets.summary.enabled and result.summary is not None:
            self._create_summary_sheet(wb, sheets.summary, result.summary)
        if sheets.transfers.enabled:
            self._create_transfers_sheet(wb, sheets.transfers, result)
        if sheets.unmatched.enabled:
            self._create_transaction_sheet(
                wb, sheets.unmatched, result.unmatched_transfers, UNMATCHED_FILL
            )
        if sheets.missing.enabled:
            self._create_transaction_sheet(wb, sheets.missing, result.missing, UNMATCHED_FILL)
        if sheets.modified.enabled:
            self._create_modified_sheet(wb, sheets.modified, result)
        if sheets.failures.enabled:
            self._create_failures_sheet(wb, sheets.failures, result)
        if sheets.balances.enabled:
            self._create_balances_sheet(wb, sheets.balances, result)

        if not wb.worksheets:
            raise ReportGenerationError("All report sheets are disabled")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to save report {output_path}: {e}") from e
        logger.info(f"Report saved: {output_path}")

        return output_path

    def _create_summary_sheet(
        self, wb: Workbook, sheet: SheetConfig, summary: ReconciliationSummary
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(sheet.name)

        ws["A1"] = "Up to YNAB Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        sections = [
            (
                "Run Information",
                [
                    ("Run:", summary.run_path),
                    ("Budget:", summary.budget_name),
                    (
                        "Reconciliation Date:",
                        summary.reconciliation_date.strftime("%Y-%m-%d %H:%M:%S"),
                    ),
                    ("Config File:", summary.config_file_used or "Default"),
                    ("Processing Time:", f"{summary.processing_time_seconds:.2f} seconds"),
                ],
            ),
            (
                "Accounts",
                [
                    ("Resolved:", summary.resolved_account_count),
                    ("Skipped:", summary.skipped_account_count),
                ],
            ),
            (
                "Transfers",
                [
                    ("Matched Pairs:", summary.matched_transfer_count),
                    ("Unmatched Legs:", summary.unmatched_transfer_count),
                    ("Reclassified as External:", summary.reclassified_count),
                    ("Match Rate:", f"{summary.transfer_match_rate:.1f}%"),
                ],
            ),
            (
                "Sync",
                [
                    ("Up Records:", summary.up_record_count),
                    ("Source Transactions:", summary.source_transaction_count),
                    ("YNAB Records:", summary.ynab_record_count),
                    ("Remote Transactions:", summary.remote_transaction_count),
                    ("Missing in YNAB:", summary.missing_count),
                    ("Modified in YNAB:", summary.modified_count),
                    ("Failures:", summary.failure_count),
                ],
            ),
        ]

        row = 3
        for title, entries in sections:
            ws[f"A{row}"] = title
            ws[f"A{row}"].font = Font(bold=True)
            row += 1
            for label, value in entries:
                ws[f"A{row}"] = label
                ws[f"B{row}"] = value
                row += 1
            row += 1

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_transfers_sheet(
        self, wb: Workbook, sheet: SheetConfig, result: ReconciliationResult
    ) -> None:
        """Create the matched transfer pairs sheet."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(
            ws,
            [
                "Amount",
                "Outgoing ID",
                "Outgoing Time",
                "Outgoing Message",
                "Incoming ID",
                "Incoming Time",
                "Incoming Message",
                "From",
                "To",
            ],
        )

        for row_num, pair in enumerate(result.transfers, start=2):
            row_data = [
                float(pair.from_.amount.amount),
                pair.to.id,
                pair.to.time.isoformat(),
                pair.to.message or "",
                pair.from_.id,
                pair.from_.time.isoformat(),
                pair.from_.message or "",
                pair.from_.from_name,
                pair.from_.to_name,
            ]
            self._write_row(ws, row_num, row_data, MATCH_FILL)

        self._auto_fit_columns(ws)

    def _create_transaction_sheet(
        self,
        wb: Workbook,
        sheet: SheetConfig,
        transactions: Sequence[Transaction],
        fill: PatternFill,
    ) -> None:
        """Create a sheet listing transactions."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, TRANSACTION_HEADERS)

        for row_num, transaction in enumerate(transactions, start=2):
            self._write_row(ws, row_num, _transaction_row(transaction), fill)

        self._auto_fit_columns(ws)

    def _create_modified_sheet(
        self, wb: Workbook, sheet: SheetConfig, result: ReconciliationResult
    ) -> None:
        """Create the sheet of source/remote pairs that drifted."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(
            ws,
            [
                "Up ID",
                "YNAB ID",
                "Up Date",
                "YNAB Date",
                "Up Amount",
                "YNAB Amount",
                "Up Message",
                "YNAB Message",
                "Up Kind",
                "YNAB Kind",
            ],
        )

        for row_num, (source, remote) in enumerate(result.modified, start=2):
            row_data = [
                source.id,
                remote.id,
                source.date.isoformat(),
                remote.date.isoformat(),
                float(source.amount.amount),
                float(remote.amount.amount),
                source.message or "",
                remote.message or "",
                f"{source.kind_label}: {source.from_name} -> {source.to_name}",
                f"{remote.kind_label}: {remote.from_name} -> {remote.to_name}",
            ]
            self._write_row(ws, row_num, row_data, VARIANCE_FILL)

        self._auto_fit_columns(ws)

    def _create_failures_sheet(
        self, wb: Workbook, sheet: SheetConfig, result: ReconciliationResult
    ) -> None:
        """Create the per-record failures sheet."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, ["Source", "Record ID", "Reason"])

        for row_num, failure in enumerate(result.failures, start=2):
            self._write_row(
                ws, row_num, [failure.source, failure.record_id, failure.reason], UNMATCHED_FILL
            )

        self._auto_fit_columns(ws)

    def _create_balances_sheet(
        self, wb: Workbook, sheet: SheetConfig, result: ReconciliationResult
    ) -> None:
        """Create the running balance sheet."""
        ws = wb.create_sheet(sheet.name)
        frame = balance_frame(result.balances)
        self._write_headers(ws, list(frame.columns))

        for row_num, values in enumerate(frame.itertuples(index=False), start=2):
            self._write_row(ws, row_num, [_cell_value(value) for value in values])

        self._auto_fit_columns(ws)

    @staticmethod
    def _write_headers(ws: Worksheet, headers: Sequence[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    @staticmethod
    def _write_row(
        ws: Worksheet,
        row_num: int,
        row_data: Sequence[Any],
        fill: Optional[PatternFill] = None,
    ) -> None:
        for col, value in enumerate(row_data, start=1):
            cell = ws.cell(row=row_num, column=col, value=value)
            cell.border = THIN_BORDER
            if fill is not None:
                cell.fill = fill

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            ws.column_dimensions[column_cells[0].column_letter].width = min(max_length + 2, 50)

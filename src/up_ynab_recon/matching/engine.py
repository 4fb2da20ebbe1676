"""
Reconciliation engine.
Runs one reconciliation: account resolution, normalization, transfer pairing,
diffing against YNAB and balance projection.
"""

from datetime import datetime
from typing import Optional
import logging

from ..config import ReconConfig
from ..models.account import Account
from ..models.records import YnabBudget
from ..models.results import ReconciliationResult, ReconciliationSummary
from ..models.transaction import NormalizationFailure, Transaction
from ..parsers.run_loader import RunSnapshot
from ..parsers.up_parser import UpParser
from ..parsers.ynab_parser import YnabParser
from ..reports.balance import running_balance
from ..sync.diff import find_missing, find_modified
from ..sync.payloads import build_write_back
from .accounts import resolve_accounts
from .transfers import TransferMatcher

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """
    Main reconciliation engine that orchestrates one run.

    Per-record problems are collected as failures and never stop the run;
    a broken transfer pairing invariant does.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the reconciliation engine.

        Args:
            config: Application configuration
        """
        self.config = config or ReconConfig()
        self.matcher = TransferMatcher(self.config.transfers)

    def reconcile(self, snapshot: RunSnapshot) -> ReconciliationResult:
        """
        Reconcile the Up and YNAB records of a run.

        Args:
            snapshot: Raw records of the run

        Returns:
            ReconciliationResult including the write-back request

        Raises:
            RunLoadError: If the budget cannot be selected
            ReconciliationInvariantViolation: If transfer pairing is inconsistent
        """
        start_time = datetime.now()
        budget = snapshot.find_budget(self.config.sync.budget_id)
        logger.info(
            f"Starting reconciliation against budget `{budget.name}`: "
            f"{len(snapshot.up_transactions)} Up txns, "
            f"{len(snapshot.ynab_transactions)} YNAB txns"
        )

        resolution = resolve_accounts(snapshot.up_accounts, snapshot.ynab_accounts)
        accounts = resolution.accounts
        failures: list[NormalizationFailure] = list(resolution.failures)

        up_transactions, up_failures = UpParser(accounts).parse(snapshot.up_transactions)
        failures.extend(up_failures)

        source, transfers, unmatched, reclassified = self.build_source(up_transactions)
        remote = self.normalize_remote(budget, accounts, snapshot, failures)

        missing = find_missing(source, remote)
        modified = find_modified(source, remote)
        write_back = build_write_back(missing, modified, self.config.sync.milliunit_factor)

        if missing:
            logger.info(f"{len(missing)} Up transactions missing from YNAB")
        else:
            logger.info("All Up transactions exist in YNAB")
        if modified:
            logger.info(f"{len(modified)} Up transactions modified in YNAB")
        else:
            logger.info("All Up transactions unmodified in YNAB")

        result = ReconciliationResult(
            accounts=accounts,
            source=source,
            remote=remote,
            transfers=transfers.matched,
            unmatched_transfers=unmatched,
            reclassified=reclassified,
            missing=missing,
            modified=modified,
            balances=running_balance(source),
            write_back=write_back,
            failures=failures,
        )

        elapsed = (datetime.now() - start_time).total_seconds()
        result.summary = self.generate_summary(
            snapshot, budget, result, len(resolution.failures), elapsed
        )
        if failures:
            logger.warning(f"{len(failures)} records could not be reconciled")
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {len(missing)} missing, "
            f"{len(modified)} modified"
        )
        return result

    def build_source(self, up_transactions: list[Transaction]):
        """
        Turn normalized Up transactions into the set to sync.

        Transfers are paired and only their receiving leg kept. Unmatched
        round up legs stay internal; other unmatched legs are reclassified as
        external (or dropped when reclassification is disabled).

        Returns:
            Tuple of (source sorted by time, TransferMatches,
            unmatched legs, reclassified transactions)
        """
        transfer_config = self.config.transfers
        externals = [t for t in up_transactions if t.is_external]
        candidates = [t for t in up_transactions if t.is_internal]

        transfers = self.matcher.match(candidates)
        source = externals + [pair.receiving_leg for pair in transfers.matched]

        reclassified: list[Transaction] = []
        for leg in transfers.unmatched:
            if leg.is_round_up(transfer_config.round_up_message):
                if leg.is_normalized():
                    source.append(leg)
                continue

            if not transfer_config.reclassify_unmatched:
                logger.warning(f"Dropping unmatched transfer leg {leg.id}")
                continue

            logger.warning(
                f"Unmatched transfer {leg.id} ({leg.message!r}), reclassifying as external"
            )
            external = leg.as_external(leg.from_name)
            reclassified.append(external)
            source.append(external)

        source = sorted(
            (t for t in source if t.is_normalized()), key=lambda t: t.time
        )
        return source, transfers, transfers.unmatched, reclassified

    def normalize_remote(
        self,
        budget: YnabBudget,
        accounts: list[Account],
        snapshot: RunSnapshot,
        failures: list[NormalizationFailure],
    ) -> list[Transaction]:
        """Normalize the YNAB records, appending their failures to ``failures``."""
        parser = YnabParser(budget, accounts, self.config.sync.milliunit_factor)
        remote, remote_failures = parser.parse(snapshot.ynab_transactions)
        failures.extend(remote_failures)
        return remote

    def generate_summary(
        self,
        snapshot: RunSnapshot,
        budget: YnabBudget,
        result: ReconciliationResult,
        skipped_accounts: int,
        processing_time: float,
    ) -> ReconciliationSummary:
        """
        Generate a summary of the reconciliation results.

        Args:
            snapshot: Raw records of the run
            budget: Budget reconciled against
            result: Result of the run
            skipped_accounts: Up accounts that could not be resolved
            processing_time: Time taken in seconds

        Returns:
            Reconciliation summary object
        """
        return ReconciliationSummary(
            run_path=str(snapshot.path),
            budget_name=budget.name,
            reconciliation_date=datetime.now(),
            resolved_account_count=len(result.accounts),
            skipped_account_count=skipped_accounts,
            up_record_count=len(snapshot.up_transactions),
            source_transaction_count=len(result.source),
            matched_transfer_count=len(result.transfers),
            unmatched_transfer_count=len(result.unmatched_transfers),
            reclassified_count=len(result.reclassified),
            ynab_record_count=len(snapshot.ynab_transactions),
            remote_transaction_count=len(result.remote),
            missing_count=len(result.missing),
            modified_count=len(result.modified),
            failure_count=len(result.failures),
            processing_time_seconds=processing_time,
            config_file_used=self.config.config_file_path,
        )

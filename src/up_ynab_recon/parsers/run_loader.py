"""
Run snapshot reader.

A run directory holds one JSON file per raw API record, grouped into one
sub-directory per component (Up accounts, YNAB transactions, ...).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Type, TypeVar
import json
import logging

from pydantic import BaseModel, ValidationError

from ..config import ReconConfig
from ..models.records import (
    UpAccountRecord,
    UpTransactionRecord,
    YnabAccountRecord,
    YnabBudget,
    YnabTransactionRecord,
)
from ..utils.exceptions import RunLoadError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


@dataclass
class RunSnapshot:
    """Raw records fetched from both ledgers during one run."""

    path: Path
    up_accounts: list[UpAccountRecord] = field(default_factory=list)
    up_transactions: list[UpTransactionRecord] = field(default_factory=list)
    ynab_accounts: list[YnabAccountRecord] = field(default_factory=list)
    ynab_transactions: list[YnabTransactionRecord] = field(default_factory=list)
    ynab_budgets: list[YnabBudget] = field(default_factory=list)

    def find_budget(self, budget_id: Optional[str] = None) -> YnabBudget:
        """
        Select the budget to reconcile against.

        Without an id, the run must contain exactly one budget.

        Raises:
            RunLoadError: If no single matching budget exists
        """
        if budget_id is None:
            if len(self.ynab_budgets) != 1:
                raise RunLoadError(
                    f"expected exactly one budget in run, found {len(self.ynab_budgets)}; "
                    "set sync.budget_id"
                )
            return self.ynab_budgets[0]

        for budget in self.ynab_budgets:
            if str(budget.id) == budget_id:
                return budget
        raise RunLoadError(f"failed to find budget with id: `{budget_id}`")


class RunLoader:
    """Reads run snapshot directories into validated raw records."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the loader with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config

    def read(self, path: Path) -> RunSnapshot:
        """
        Read every component of a run.

        Args:
            path: Run directory

        Returns:
            RunSnapshot with all components that were present

        Raises:
            RunLoadError: If the directory is missing or a record is invalid
        """
        logger.info(f"Opening run: {path}")
        if not path.is_dir():
            raise RunLoadError(f"run missing at path `{path}`")

        layout = self.config.input
        snapshot = RunSnapshot(
            path=path,
            up_accounts=self._read_entries(path / layout.up_accounts, UpAccountRecord),
            up_transactions=self._read_entries(
                path / layout.up_transactions, UpTransactionRecord
            ),
            ynab_accounts=self._read_entries(path / layout.ynab_accounts, YnabAccountRecord),
            ynab_transactions=self._read_entries(
                path / layout.ynab_transactions, YnabTransactionRecord
            ),
            ynab_budgets=self._read_entries(path / layout.ynab_budgets, YnabBudget),
        )

        logger.info(
            f"Loaded run: {len(snapshot.up_accounts)} Up accounts, "
            f"{len(snapshot.up_transactions)} Up transactions, "
            f"{len(snapshot.ynab_accounts)} YNAB accounts, "
            f"{len(snapshot.ynab_transactions)} YNAB transactions, "
            f"{len(snapshot.ynab_budgets)} budgets"
        )
        return snapshot

    def _read_entries(self, directory: Path, model: Type[RecordT]) -> list[RecordT]:
        if not directory.is_dir():
            logger.error(f"Run component `{directory.name}` missing, skipping...")
            return []

        # File names start with the record timestamp, so sorting keeps fetch order
        return [self._read_entry(file_path, model) for file_path in sorted(directory.glob("*.json"))]

    def _read_entry(self, file_path: Path, model: Type[RecordT]) -> RecordT:
        try:
            with open(file_path, "r", encoding=self.config.input.encoding) as f:
                payload = json.load(f)
            return model.model_validate(payload)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse {file_path}: {e}")
            raise RunLoadError(f"failed to parse `{file_path}`: {e}") from e

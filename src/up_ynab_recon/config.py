"""Configuration loader and validation for reconciliation settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Order matters: the index is the family both legs of a transfer must share
DEFAULT_PREFIX_FAMILIES = [
    ("Transfer to ", "Transfer from "),
    ("Auto Transfer to ", "Auto Transfer from "),
    ("Cover to ", "Cover from "),
    ("Quick save transfer to ", "Quick save transfer from "),
    ("Forward to ", "Forward from "),
]


class InputConfig(BaseModel):
    """Where run snapshots live and how they are laid out."""

    run_dir: str = "runs"
    encoding: str = "utf-8"
    up_accounts: str = "up_accounts"
    up_transactions: str = "up_transactions"
    ynab_accounts: str = "ynab_accounts"
    ynab_transactions: str = "ynab_transactions"
    ynab_budgets: str = "ynab_budgets"


class PrefixFamily(BaseModel):
    """Message prefixes Up writes on the two legs of one kind of transfer."""

    to: str
    from_: str = Field(alias="from")

    model_config = ConfigDict(populate_by_name=True)


class TransferConfig(BaseModel):
    """Configuration for transfer pairing."""

    window_seconds: int = 15
    round_up_message: str = "Round Up"
    reclassify_unmatched: bool = True
    prefix_families: list[PrefixFamily] = Field(
        default_factory=lambda: [
            PrefixFamily(to=to, from_=from_) for to, from_ in DEFAULT_PREFIX_FAMILIES
        ]
    )

    @field_validator("window_seconds")
    @classmethod
    def _non_negative_window(cls, value: int) -> int:
        if value < 0:
            raise ValueError("window_seconds must not be negative")
        return value

    @field_validator("prefix_families")
    @classmethod
    def _at_least_one_family(cls, value: list[PrefixFamily]) -> list[PrefixFamily]:
        if not value:
            raise ValueError("prefix_families must name at least one family")
        return value


class SyncConfig(BaseModel):
    """Configuration for the YNAB side."""

    budget_id: Optional[str] = None
    milliunit_factor: int = 10


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    transfers: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Transfers"))
    unmatched: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Unmatched Transfers")
    )
    missing: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Missing"))
    modified: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Modified"))
    failures: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Failures"))
    balances: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Balances"))


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "reconciliation_report_{date}_{time}.xlsx"


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    transfers: TransferConfig = Field(default_factory=TransferConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "run_dir": "runs",
            "encoding": "utf-8",
            "up_accounts": "up_accounts",
            "up_transactions": "up_transactions",
            "ynab_accounts": "ynab_accounts",
            "ynab_transactions": "ynab_transactions",
            "ynab_budgets": "ynab_budgets",
        },
        "transfers": {
            "window_seconds": 15,
            "round_up_message": "Round Up",
            "reclassify_unmatched": True,
            "prefix_families": [
                {"to": to, "from": from_} for to, from_ in DEFAULT_PREFIX_FAMILIES
            ],
        },
        "sync": {
            "budget_id": None,
            "milliunit_factor": 10,
        },
        "output": {
            "excel": {
                "filename_template": "reconciliation_report_{date}_{time}.xlsx",
            },
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "transfers": {"enabled": True, "name": "Transfers"},
                "unmatched": {"enabled": True, "name": "Unmatched Transfers"},
                "missing": {"enabled": True, "name": "Missing"},
                "modified": {"enabled": True, "name": "Modified"},
                "failures": {"enabled": True, "name": "Failures"},
                "balances": {"enabled": True, "name": "Balances"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": None,
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Expected a mapping at the top of {config_path}")

        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Up to YNAB Reconciliation Configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")

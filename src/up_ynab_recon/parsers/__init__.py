"""Run snapshot loading and Up / YNAB normalizers."""

from .run_loader import RunLoader, RunSnapshot
from .up_parser import UpParser
from .ynab_parser import YnabParser

__all__ = ["RunLoader", "RunSnapshot", "UpParser", "YnabParser"]

"""Diffing against YNAB and building write-back requests."""

from .diff import find_missing, find_modified
from .payloads import build_write_back, to_new_payload, to_update_payload, verify_write_back

__all__ = [
    "find_missing",
    "find_modified",
    "build_write_back",
    "to_new_payload",
    "to_update_payload",
    "verify_write_back",
]

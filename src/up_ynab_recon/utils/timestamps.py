"""ISO 8601 timestamp parsing shared by the parsers and the CLI."""

from datetime import datetime
import re

# Before Python 3.11 fromisoformat rejects a "Z" suffix and any fraction that
# is not exactly 3 or 6 digits
_UTC_SUFFIX = re.compile(r"[zZ]$")
_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def _microseconds(match: "re.Match[str]") -> str:
    digits = match.group(2)[:6].ljust(6, "0")
    return f"{match.group(1)}.{digits}"


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp or an ISO 8601 date.

    A trailing ``Z`` or ``z`` means UTC. Fractional seconds of any length are
    accepted and cut to microseconds.

    Raises:
        ValueError: If the value is not a valid date or time
    """
    text = _UTC_SUFFIX.sub("+00:00", value.strip())
    text = _FRACTION.sub(_microseconds, text)
    return datetime.fromisoformat(text)

"""
File name normalization for uploaded blobs.

Turns an untrusted client filename into a storage key that is safe in a
blob URL and sorts by upload time.

Format: {YYYYMMDDHHMMSS}-{sanitized name}, lower-cased, UTC clock.

Examples:
    >>> sanitize_file_name("My Report.csv")
    'My-Report.csv'
    >>> normalize_file_name("My Report.csv", now=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc))
    '20240501093000-my-report.csv'

Two uploads of the same name within one second map to the same key; the
later one overwrites the earlier.

Exports:
    strip_client_path: Drop a browser or OS directory prefix
    sanitize_file_name: Character-level cleanup (idempotent)
    normalize_file_name: Full key derivation with timestamp prefix
    TIMESTAMP_FORMAT: strftime pattern of the prefix
"""

import re
from datetime import datetime, timezone
from typing import Optional

from exceptions import ValidationError

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

_WHITESPACE_RUN = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^A-Za-z0-9_.\-]")
_HYPHEN_RUN = re.compile(r"-{2,}")
_CLIENT_PATH = re.compile(r"[\\/]")


def strip_client_path(raw_name: str) -> str:
    """Drop any client-side directory part ("C:\\fakepath\\a.csv" -> "a.csv")."""
    return _CLIENT_PATH.split(raw_name)[-1]


def sanitize_file_name(raw_name: str) -> str:
    """
    Clean a filename without adding a timestamp.

    Rules:
        - Drop any client-side directory part ("C:\\fakepath\\a.csv" -> "a.csv")
        - Trim, then replace each whitespace run with one hyphen
        - Strip everything except letters, digits, underscore, dot, hyphen
        - Collapse repeated hyphens

    Applying it twice gives the same result as applying it once.
    """
    name = strip_client_path(raw_name).strip()
    name = _WHITESPACE_RUN.sub("-", name)
    name = _DISALLOWED.sub("", name)
    name = _HYPHEN_RUN.sub("-", name)
    return name


def normalize_file_name(raw_name: str, now: Optional[datetime] = None) -> str:
    """
    Derive the storage key for an upload.

    Args:
        raw_name: Filename as sent by the client.
        now: Clock override for tests (defaults to now UTC). Naive values
            are treated as UTC.

    Returns:
        Lower-cased "{timestamp}-{sanitized name}".

    Raises:
        ValidationError: Nothing usable is left after sanitizing.
    """
    cleaned = sanitize_file_name(raw_name or "")
    if not cleaned.strip(".-_"):
        raise ValidationError(f"File name '{raw_name}' has no usable characters")

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)

    return f"{now.strftime(TIMESTAMP_FORMAT)}-{cleaned}".lower()

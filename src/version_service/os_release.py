"""
Parser for the os-release(5) file.

Keys are folded to lowercase and values keep their content verbatim apart
from one layer of surrounding double quotes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_OS_RELEASE_PATH = "/etc/os-release"


class ReadError(OSError):
    """Raised when the release file cannot be opened or read."""

    pass


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def parse_os_release(lines: Iterable[str]) -> dict[str, str]:
    """
    Parse KEY=VALUE lines into a release record.

    Blank lines, lines starting with '#' and lines without '=' are skipped.
    A repeated key keeps the last value.

    Args:
        lines: Lines of the release file, with or without line endings.

    Returns:
        Mapping of lowercase keys to values.
    """
    record: dict[str, str] = {}
    for line in lines:
        line = line.rstrip("\r\n")
        if not line or line.startswith("#"):
            continue

        key, sep, value = line.partition("=")
        if not sep:
            continue

        record[key.lower()] = _strip_quotes(value)
    return record


def read_os_release(path: str | Path = DEFAULT_OS_RELEASE_PATH) -> dict[str, str]:
    """
    Read and parse a release file.

    Raises:
        ReadError: If the file cannot be opened or fails mid-read. Nothing
            parsed before the failure is returned.
    """
    try:
        f = open(path, encoding="utf-8")
    except OSError as e:
        raise ReadError(f"failed to open {path}: {e}") from e

    with f:
        try:
            record = parse_os_release(f)
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(f"error reading {path}: {e}") from e

    logger.debug(f"Read {len(record)} entries from {path}")
    return record


def format_os_release(record: Mapping[str, str]) -> str:
    """Serialize a release record back to unquoted key=value lines."""
    return "".join(f"{key}={value}\n" for key, value in record.items())

"""
Serial number derivation from the CFG0/CFG1 identifier words.

Two representations are published side by side:

- serial_number: the legacy value, CFG0 + CFG1 as unsigned 64-bit
  integers, in decimal.
- serial_number_real: the chip serial as printed by the vendor, CFG1 hex
  followed by CFG0 hex.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from version_service.identifiers import ResolvedIdentifier
from version_service.sources import IdentifierField

UINT64_MASK = 0xFFFFFFFFFFFFFFFF

_HEX_RE = re.compile(r"[0-9a-fA-F]+")


class ParseError(ValueError):
    """Raised when an identifier is not a valid unsigned 64-bit hex string."""

    pass


@dataclass(frozen=True)
class SerialNumbers:
    """Derived serial numbers. Both are always produced together."""

    serial_number: str
    serial_number_real: str

    def to_fields(self) -> dict[str, str]:
        return {
            "serial_number": self.serial_number,
            "serial_number_real": self.serial_number_real,
        }


def parse_hex(value: str) -> int:
    """Parse an unprefixed hex string as an unsigned 64-bit integer."""
    if not _HEX_RE.fullmatch(value):
        raise ParseError(f"cannot parse hex string '{value}'")
    number = int(value, 16)
    if number > UINT64_MASK:
        raise ParseError(f"hex string '{value}' is out of range for 64 bits")
    return number


def legacy_serial_number(cfg0: int, cfg1: int) -> str:
    return str((cfg0 + cfg1) & UINT64_MASK)


def real_serial_number(cfg0_hex: str, cfg1_hex: str) -> str:
    return cfg1_hex + cfg0_hex


def derive_serials(cfg0_hex: str, cfg1_hex: str) -> SerialNumbers:
    """
    Derive both serial numbers from resolved hex strings.

    Raises:
        ParseError: If either value is not valid hex.
    """
    try:
        cfg0 = parse_hex(cfg0_hex)
    except ParseError as e:
        raise ParseError(f"failed to parse CFG0: {e}") from e
    try:
        cfg1 = parse_hex(cfg1_hex)
    except ParseError as e:
        raise ParseError(f"failed to parse CFG1: {e}") from e

    return SerialNumbers(
        serial_number=legacy_serial_number(cfg0, cfg1),
        serial_number_real=real_serial_number(cfg0_hex, cfg1_hex),
    )


def combine(
    identifiers: Mapping[IdentifierField, ResolvedIdentifier],
) -> tuple[SerialNumbers | None, list[str]]:
    """
    Derive serial numbers from resolved identifiers.

    Returns:
        Tuple of (serials, problems). serials is None when either field is
        unresolved or unparseable; problems describes why.
    """
    problems = []
    for field in IdentifierField:
        resolved = identifiers.get(field)
        if resolved is None:
            problems.append(f"{field.name} unavailable (not resolved)")
        elif not resolved.ok:
            problems.append(str(resolved.error))
    if problems:
        return None, problems

    try:
        serials = derive_serials(
            identifiers[IdentifierField.CFG0].value,
            identifiers[IdentifierField.CFG1].value,
        )
    except ParseError as e:
        return None, [str(e)]

    return serials, []
